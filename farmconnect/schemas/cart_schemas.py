from sqlmodel import SQLModel


class CartAddRequest(SQLModel):
    product_id: int
    # signed: a negative quantity takes items out of an existing line
    quantity: int = 1
