from storefront.models.dto.common import CamelModel, ErrorResponse, SuccessResponse

__all__ = ["CamelModel", "ErrorResponse", "SuccessResponse"]
