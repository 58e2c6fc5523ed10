"""
HTTP client integration for OAuth1 signing

This module plugs the OAuth1 signer into the requests library as an auth hook,
so a prepared request is signed exactly as it will go on the wire.
"""

import logging
from typing import Optional
from urllib.parse import parse_qsl

from requests.auth import AuthBase
from requests.models import PreparedRequest

from .oauth1_signer import OAuth1Signer, Credentials

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class OAuth1Auth(AuthBase):
    """
    requests auth hook that adds an OAuth1 Authorization header.

    Form-encoded body parameters are signed along with the query string;
    other body types are not part of an OAuth1 signature.
    """

    def __init__(self, signer: OAuth1Signer, credentials: Optional[Credentials] = None,
                 include_callback: bool = False):
        self.signer = signer
        self.credentials = credentials
        self.include_callback = include_callback

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        body_parameters = self._form_parameters(request)
        logger.debug(f"Signing prepared {request.method} request with {len(body_parameters)} body parameters")
        request.headers['Authorization'] = self.signer.build_header(
            request.method,
            request.url,
            self.credentials,
            body_parameters,
            self.include_callback,
        )
        return request

    @staticmethod
    def _form_parameters(request: PreparedRequest):
        content_type = request.headers.get('Content-Type', '')
        if not request.body or not content_type.startswith(FORM_CONTENT_TYPE):
            return []

        body = request.body
        if isinstance(body, bytes):
            body = body.decode('utf-8')
        return parse_qsl(body, keep_blank_values=True)
