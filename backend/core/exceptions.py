"""Custom exceptions for the backend API

Every exception carries the error code and HTTP status that the global
exception handlers turn into the JSON error envelope.
"""
from typing import Optional, Dict, Any


class APIException(Exception):
    """Base exception for all API-related errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "API_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class NotFoundException(APIException):
    """A referenced entity does not exist"""

    def __init__(self, resource: str, resource_id: Optional[str] = None, error_code: str = "NOT_FOUND"):
        super().__init__(
            message=f"{resource} not found",
            error_code=error_code,
            status_code=404,
            details={"id": resource_id} if resource_id else {}
        )
        self.resource = resource
        self.resource_id = resource_id


class ImageNotFoundException(NotFoundException):
    """An image id in a request body does not exist"""

    def __init__(self, image_id: Optional[str] = None, status_code: int = 404):
        super().__init__("Image", image_id, error_code="IMAGE_NOT_FOUND")
        self.status_code = status_code


class TargetNotFoundException(NotFoundException):
    """The target of an image copy/move does not exist"""

    def __init__(self, target_type: str, target_id: Optional[str] = None):
        super().__init__(f"Target {target_type}", target_id, error_code="TARGET_NOT_FOUND")
        self.details["target_type"] = target_type
        self.target_type = target_type


class ValidationException(APIException):
    """Exception raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details={"field": field} if field else {}
        )
        self.field = field


class ServiceException(Exception):
    """Exception raised when an external service fails"""

    def __init__(
        self,
        message: str,
        service_name: str,
        retryable: bool = True,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.service_name = service_name
        self.retryable = retryable
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "service": self.service_name,
            "retryable": self.retryable,
            "original_error": str(self.original_error) if self.original_error else None
        }
