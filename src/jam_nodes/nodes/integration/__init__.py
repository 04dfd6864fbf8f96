from .http_request import HttpMethod, HttpRequestInput, HttpRequestOutput, http_request_node

__all__ = ["HttpMethod", "HttpRequestInput", "HttpRequestOutput", "http_request_node"]
