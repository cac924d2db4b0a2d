"""
Schemas de entrada da API (corpo das requisições).

- OrderIn: pedido com cliente, itens e totais calculados pelo frontend
- StatusIn: troca de status do pedido
- LoginIn: credenciais
- ProductIn: cadastro/edição de produto (admin)
- ConnectionIn: teste de conexão com o Postgres (admin)
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

# limite do INTEGER do Postgres; ids acima disso não existem em nenhum backend
MAX_ID = 2**31 - 1


class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    address: str = Field(..., min_length=1)


class OrderItemIn(BaseModel):
    id: int = Field(..., ge=1, le=MAX_ID, validation_alias=AliasChoices("id", "productId"), description="ID do produto")
    # nome e preço enviados pelo carrinho são ignorados: o snapshot vem do catálogo
    name: Optional[str] = None
    price: Optional[Decimal] = None
    quantity: int = Field(..., ge=1)


class OrderIn(BaseModel):
    customer: CustomerIn
    items: List[OrderItemIn] = Field(..., min_length=1)
    subtotal: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    shipping: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    tax: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    total: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class StatusIn(BaseModel):
    status: str = Field(..., min_length=1)


class LoginIn(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category: str = Field(..., min_length=1)
    image: str = ""
    stock: int = Field(0, ge=0, le=MAX_ID)


class ConnectionIn(BaseModel):
    host: str = "localhost"
    port: int = Field(5432, ge=1, le=65535)
    database: str = "postgres"
    username: str = "postgres"
    password: str = ""


def describe(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )


def parse(model, payload, error: str = "Validation failed"):
    """Valida o corpo JSON; qualquer problema vira ValidationError (400)."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", error=error)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(describe(e), error=error) from e
