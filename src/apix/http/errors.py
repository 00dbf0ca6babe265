"""HTTP 客户端与服务端异常"""

from apix.common.exceptions import ApixException


class HttpError(ApixException):
    """HTTP 工具异常基类"""


# =============================================================================
# 客户端
# =============================================================================


class UnsupportedMediaTypeError(HttpError):
    def __init__(self, content_type: str = ""):
        self.content_type = content_type
        super().__init__(f"unsupported media type: {content_type}", error_code="UNSUPPORTED_MEDIA_TYPE")


# =============================================================================
# 服务端
# =============================================================================


class NoBodyError(HttpError):
    def __init__(self):
        super().__init__("request body is empty", error_code="NO_BODY")


class NotJSONBodyError(HttpError):
    def __init__(self):
        super().__init__("request body is not JSON", error_code="NOT_JSON_BODY")


class EmptyResponseError(HttpError):
    def __init__(self):
        super().__init__("empty JSON response body", error_code="EMPTY_RESPONSE")


class InvalidRedirectCodeError(HttpError):
    def __init__(self):
        super().__init__("invalid redirect status code", error_code="INVALID_REDIRECT_CODE")


class FilterNotPassedError(HttpError):
    def __init__(self):
        super().__init__("filter check is not passed", error_code="FILTER_NOT_PASSED")


class NoRouterError(HttpError):
    def __init__(self):
        super().__init__("entrypoint requires a router", error_code="NO_ROUTER")


class TLSConfigError(HttpError):
    def __init__(self):
        super().__init__(
            "cert or key file in the TLS configuration does not exist",
            error_code="TLS_CONFIG_ERROR",
        )
