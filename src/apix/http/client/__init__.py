"""HTTP 客户端工具"""

from apix.http.client.client import Client, new_client_with_proxy
from apix.http.client.request import Request, parse_url
from apix.http.client.response import Response, xml_to_dict

__all__ = ["Client", "Request", "Response", "new_client_with_proxy", "parse_url", "xml_to_dict"]
