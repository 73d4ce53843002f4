from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select
from farmconnect.database import get_session
from farmconnect.models.cart import CartItem
from farmconnect.models.product import Product
from farmconnect.models.user import User
from farmconnect.schemas.cart_schemas import CartAddRequest
from farmconnect.utils.token import get_current_customer


router = APIRouter()


def _cart_item_to_dict(item: CartItem) -> dict:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "created_at": item.created_at,
    }


# Add to Cart

@router.post("", status_code=201)
def add_to_cart(
    data: CartAddRequest,
    response: Response,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer)
):
    existing_item = session.exec(
        select(CartItem).where(
            CartItem.customer_id == current_user.id,
            CartItem.product_id == data.product_id
        )
    ).first()

    if existing_item:
        response.status_code = 200
        # negative quantities take items out; an emptied line disappears
        existing_item.quantity += data.quantity

        if existing_item.quantity <= 0:
            session.delete(existing_item)
            session.commit()
            return {"message": "Item removed from cart"}

        session.add(existing_item)
        session.commit()
        session.refresh(existing_item)
        return {"message": "Cart updated", "item": _cart_item_to_dict(existing_item)}

    if data.quantity <= 0:
        raise HTTPException(400, "Cannot add item with zero or negative quantity")

    product = session.get(Product, data.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    new_item = CartItem(
        customer_id=current_user.id,
        product_id=product.id,
        quantity=data.quantity,
    )

    session.add(new_item)
    session.commit()
    session.refresh(new_item)

    return {"message": "Added to cart", "item": _cart_item_to_dict(new_item)}


# View Cart

@router.get("")
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer)
):
    cart_items = session.exec(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.customer_id == current_user.id)
        .order_by(CartItem.created_at, CartItem.id)
    ).all()

    items_response = []
    subtotal = 0

    for cart_item, product in cart_items:
        line_total = product.price * cart_item.quantity
        subtotal += line_total

        items_response.append({
            "item_id": cart_item.id,
            "product_id": product.id,
            "product_name": product.name,
            "farmer_id": product.farmer_id,
            "price": product.price,
            "quantity": cart_item.quantity,
            "total": line_total
        })

    return {
        "items": items_response,
        "subtotal": subtotal,
    }


# Remove Cart Item

@router.delete("/{item_id}")
def remove_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer)
):
    item = session.get(CartItem, item_id)

    if not item or item.customer_id != current_user.id:
        raise HTTPException(404, "Cart item not found")

    session.delete(item)
    session.commit()

    return {"message": "Item removed from cart"}
