from typing import Dict, Optional
from fastapi import Request


def extract_user_identity(request: Optional[Request], payload: Dict) -> str:
    """
    Extract user identity from:
    1. Cloud Run IAM header
    2. x-user-id header
    3. Payload
    4. Fallback to anonymous
    """
    if request is not None:
        user_email = request.headers.get("X-Goog-Authenticated-User-Email")
        if user_email:
            return user_email.split(":")[-1]

        user_id = request.headers.get("x-user-id")
        if user_id:
            return user_id

    if payload.get("user_id"):
        return payload["user_id"]

    return "anonymous"
