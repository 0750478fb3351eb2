# mobile_service/routers/customers.py
"""Customer registry (manager only)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from mobile_service.auth import Caller, get_current_manager
from mobile_service.database import get_db
from mobile_service.schemas.customer import CustomerDetail, CustomerOut, CustomerUpdate
from mobile_service.services import customer_service

router = APIRouter(prefix="/customers")


@router.get("", response_model=list[CustomerOut], summary="All customers")
def list_customers(db: Session = Depends(get_db), _: Caller = Depends(get_current_manager)):
    return customer_service.list_customers(db)


@router.get("/{customer_id}", response_model=CustomerDetail, summary="Customer with booking history")
def get_customer(customer_id: str, db: Session = Depends(get_db), _: Caller = Depends(get_current_manager)):
    customer = customer_service.get_customer_or_404(db, customer_id)
    detail = CustomerOut.model_validate(customer).model_dump()
    detail["appointments"] = customer_service.customer_appointments(db, customer_id)
    return detail


@router.patch("/{customer_id}", response_model=CustomerOut, summary="Edit a customer")
def update_customer(customer_id: str, body: CustomerUpdate, db: Session = Depends(get_db),
                    _: Caller = Depends(get_current_manager)):
    return customer_service.update_customer(db, customer_id, body.model_dump(exclude_unset=True))
