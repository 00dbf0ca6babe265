"""HTTP 常量"""

CHARSET_UTF8 = "charset=UTF-8"

# === 请求方法 ===
PUT = "PUT"
GET = "GET"
POST = "POST"
HEAD = "HEAD"
PATCH = "PATCH"
DELETE = "DELETE"
OPTIONS = "OPTIONS"

METHODS = (GET, HEAD, POST, PUT, PATCH, DELETE, OPTIONS)

# === MIME 类型 ===
MIME_APPLICATION_JSON = "application/json"
MIME_APPLICATION_JSON_CHARSET_UTF8 = f"{MIME_APPLICATION_JSON}; {CHARSET_UTF8}"
MIME_APPLICATION_XML = "application/xml"
MIME_TEXT_XML = "text/xml"
MIME_APPLICATION_FORM = "application/x-www-form-urlencoded"
MIME_MULTIPART_FORM = "multipart/form-data"
MIME_TEXT_PLAIN = "text/plain"

# === 请求头 ===
HEADER_ORIGIN = "Origin"
HEADER_ACCEPT = "Accept"
HEADER_VARY = "Vary"
HEADER_COOKIE = "Cookie"
HEADER_SET_COOKIE = "Set-Cookie"
HEADER_UPGRADE = "Upgrade"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CONTENT_LENGTH = "Content-Length"
HEADER_LOCATION = "Location"
HEADER_AUTHORIZATION = "Authorization"

# === CORS ===
HEADER_ACCESS_CONTROL_REQUEST_METHOD = "Access-Control-Request-Method"
HEADER_ACCESS_CONTROL_ALLOW_METHODS = "Access-Control-Allow-Methods"
HEADER_ACCESS_CONTROL_REQUEST_HEADERS = "Access-Control-Request-Headers"
HEADER_ACCESS_CONTROL_ALLOW_ORIGIN = "Access-Control-Allow-Origin"
HEADER_ACCESS_CONTROL_ALLOW_HEADERS = "Access-Control-Allow-Headers"
HEADER_ACCESS_CONTROL_EXPOSE_HEADERS = "Access-Control-Expose-Headers"
HEADER_ACCESS_CONTROL_ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
HEADER_ACCESS_CONTROL_MAX_AGE = "Access-Control-Max-Age"
