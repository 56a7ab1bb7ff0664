from typing import Any, List, Optional
from pydantic import BaseModel, Field

# Each class => one collection, see COLLECTIONS in main.py

class Product(BaseModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0, allow_inf_nan=False)
    category: str = Field(min_length=1)
    image: str = ""

class Subpage(BaseModel):
    name: str = Field(min_length=1)

class User(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    phone: Optional[str] = None

class Order(BaseModel):
    products: List[Any]
    status: str = "Pending"
    orderCode: str = Field(min_length=1)

class Theme(BaseModel):
    color: str = Field(min_length=1)
    name: str = Field(min_length=1)
    logo: str = ""

class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
