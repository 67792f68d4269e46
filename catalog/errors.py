# catalog/errors.py

# Domain errors. Everything below is raised to the immediate caller and
# translated to HTTP status codes in catalog/main.py.


class CatalogError(Exception):
    message = "catalog error"

    def __init__(self, message=None, product_id=None):
        self.product_id = product_id
        super().__init__(message or self.message)


# ---------------------------
# Inventory level (expected, recoverable)
# ---------------------------
class InsufficientStock(CatalogError):
    message = "insufficient stock"


class ProductNotFound(CatalogError):
    message = "product not found"


class ProductAlreadyExists(CatalogError):
    message = "product already exists"


# ---------------------------
# Storage level (transient, distinct from not-found)
# ---------------------------
class StorageError(CatalogError):
    message = "storage failure"


class FailedToSave(StorageError):
    message = "failed to save product"


class FailedToGet(StorageError):
    message = "failed to get product"


class FailedToDelete(StorageError):
    message = "failed to delete product"


# ---------------------------
# External collaborators
# ---------------------------
class FetchFailed(CatalogError):
    message = "failed to fetch product details"


class PublishFailed(CatalogError):
    message = "failed to publish change event"
