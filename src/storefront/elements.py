"""Every module that declares storefront domain elements.

Domain traversal only reaches one directory below ``domain.py``, so the
aggregate packages nested deeper are imported here. Import this module before
calling ``storefront.init()``.
"""

from storefront.catalogue.category import category, management as category_management  # noqa: F401
from storefront.catalogue.product import management as product_management, product  # noqa: F401
from storefront.identity.address import address, management as address_management  # noqa: F401
from storefront.identity.user import account, user  # noqa: F401
from storefront.ordering.order import cancellation, events, order, placement, status  # noqa: F401
from storefront.reviews.review import management as review_management, review  # noqa: F401
