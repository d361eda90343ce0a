CARTS = "carts"
WISHLISTS = "wishlists"

# Product fields shown next to each cart line.
CART_PRODUCT_FIELDS = {"name": 1, "price": 1, "salePrice": 1, "isSale": 1, "taxRate": 1, "discountPercentage": 1}
