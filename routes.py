"""
HTTP routes for the Shop API

Every router is built by a function and attached to the application in
``register_routes``; no handler is bound to a global app at import time.
"""
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Type

from fastapi import APIRouter, Depends, FastAPI, Path, Request
from pydantic import BaseModel
from pymongo.database import Database

from database import ORDERS, PRODUCTS, UNIQUE_FIELDS, USERS
from pipeline import Resource, unwrap
from schemas import (
    DomainAvailability,
    DomainRegistration,
    Message,
    Order,
    OrderUpdate,
    Product,
    ProductUpdate,
    RegisteredDomain,
    ShipmentStatus,
    User,
    UserUpdate,
)

REGISTRATION_PERIOD = timedelta(days=365)
DELIVERY_DELAY = timedelta(days=2)
SHIPMENT_STATUS = "In transit"
SHIPMENT_LOCATION = "Regional distribution center"


def get_db(request: Request) -> Database:
    return request.app.state.db


# ----------------------- Resources -----------------------
def build_resource_router(
    collection_name: str,
    label: str,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    tag: str,
    unique_field: Optional[str] = None,
) -> APIRouter:
    """List, create, update and delete for one collection, mounted at ``/<collection_name>``."""
    router = APIRouter(prefix=f"/{collection_name}", tags=[tag])

    def get_resource(db: Database = Depends(get_db)) -> Resource:
        return Resource(db, collection_name, label, unique_field)

    @router.get("", summary=f"Get a list of {collection_name}")
    def list_documents(resource: Resource = Depends(get_resource)) -> List[dict]:
        return unwrap(resource.list())

    @router.post("", status_code=201, summary=f"Add a {label} to the database")
    def create_document(body: create_schema, resource: Resource = Depends(get_resource)) -> dict:
        return unwrap(resource.create(body.model_dump(mode="json")))

    @router.put("/{item_id}", summary=f"Update {label} details in the database")
    def update_document(
        body: update_schema,
        item_id: str = Path(..., min_length=5, description=f"ID of the {label} to update"),
        resource: Resource = Depends(get_resource),
    ) -> dict:
        return unwrap(resource.update(item_id, body.model_dump(mode="json", exclude_none=True)))

    @router.delete("/{item_id}", response_model=Message, summary=f"Delete a {label} for the given id")
    def delete_document(
        item_id: str = Path(..., min_length=5, description=f"ID of the {label} to delete"),
        resource: Resource = Depends(get_resource),
    ):
        return unwrap(resource.delete(item_id))

    return router


# ----------------------- Mocks -----------------------
def build_domain_router() -> APIRouter:
    router = APIRouter(prefix="/domain", tags=["Domain"])

    @router.get("/check/{domainName}", response_model=DomainAvailability, summary="Check domain availability (mock)")
    def check_domain(domainName: str):
        return DomainAvailability(domainName=domainName, available=random.random() < 0.5)

    @router.post("/register", status_code=201, response_model=RegisteredDomain, summary="Register a domain (mock)")
    def register_domain(body: DomainRegistration):
        now = datetime.now(timezone.utc)
        return RegisteredDomain(
            domainName=body.domainName,
            registrant=body.registrant,
            registrationDate=now,
            expirationDate=now + REGISTRATION_PERIOD,
        )

    return router


def build_tracking_router() -> APIRouter:
    router = APIRouter(prefix="/orders", tags=["Orders"])

    @router.get("/track/{trackingNumber}", response_model=ShipmentStatus, summary="Track a shipment (mock)")
    def track_shipment(trackingNumber: str):
        delivery = datetime.now(timezone.utc).date() + DELIVERY_DELAY
        return ShipmentStatus(
            trackingNumber=trackingNumber,
            status=SHIPMENT_STATUS,
            location=SHIPMENT_LOCATION,
            estimatedDelivery=delivery.isoformat(),
        )

    return router


def register_routes(app: FastAPI) -> None:
    resources = [
        (USERS, "user", User, UserUpdate, "Users"),
        (PRODUCTS, "product", Product, ProductUpdate, "Products"),
        (ORDERS, "order", Order, OrderUpdate, "Orders"),
    ]
    for collection_name, label, create_schema, update_schema, tag in resources:
        app.include_router(
            build_resource_router(
                collection_name,
                label,
                create_schema,
                update_schema,
                tag,
                unique_field=UNIQUE_FIELDS.get(collection_name),
            )
        )
    app.include_router(build_tracking_router())
    app.include_router(build_domain_router())
