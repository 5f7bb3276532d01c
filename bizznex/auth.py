import base64
import json
import logging
import time
from typing import Optional

import httpx
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import Settings
from .database import get_db, get_settings
from .errors import AuthError
from .models import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
LOCAL_PROFILE_ID = "local-dev"

# Cache for Google's public keys
_cached_keys = None


async def get_google_public_keys():
    """Fetch Google's public keys for Firebase token verification"""
    global _cached_keys
    if _cached_keys:
        logger.debug("✅ Using cached Google public keys")
        return _cached_keys

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(GOOGLE_CERTS_URL)
            if response.status_code == 200:
                _cached_keys = response.json()
                logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
                return _cached_keys
            else:
                logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


def _b64_decode(segment: str) -> bytes:
    padding_len = 4 - len(segment) % 4
    return base64.urlsafe_b64decode(segment + ("=" * padding_len if padding_len != 4 else ""))


async def verify_firebase_token(token: str, project_id: Optional[str]) -> dict:
    """
    Verify a Firebase ID token with full signature verification.
    Uses Google's public keys to verify the RS256 JWT signature, then checks claims.
    """
    global _cached_keys

    if not project_id:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise AuthError("Identity provider not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise AuthError("Invalid token format")

    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64_decode(header_b64))
    except ValueError as e:
        raise AuthError("Invalid token header") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256":
        raise AuthError("Invalid token algorithm")
    if not kid:
        raise AuthError("Token missing key ID")

    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        logger.warning(f"⚠️ Key ID {kid} not found in public keys, invalidating cache and retrying")
        _cached_keys = None
        public_keys = await get_google_public_keys()
        if not public_keys or kid not in public_keys:
            raise AuthError("Unable to verify token signature")

    cert = load_pem_x509_certificate(public_keys[kid].encode(), default_backend())
    message = f"{header_b64}.{payload_b64}".encode()

    try:
        cert.public_key().verify(
            _b64_decode(signature_b64), message, padding.PKCS1v15(), hashes.SHA256()
        )
    except Exception as e:
        logger.error(f"❌ Token signature verification failed: {str(e)}")
        raise AuthError("Invalid token signature") from e

    try:
        claims = json.loads(_b64_decode(payload_b64))
    except ValueError as e:
        raise AuthError("Invalid token payload") from e

    if claims.get("aud") != project_id:
        raise AuthError("Invalid token audience")
    if claims.get("iss") != f"https://securetoken.google.com/{project_id}":
        raise AuthError("Invalid token issuer")

    now = time.time()
    if claims.get("exp", 0) < now:
        raise AuthError("Token has expired. Please refresh your session.")
    if claims.get("iat", 0) > now + 60:  # Allow 60 seconds clock skew
        raise AuthError("Invalid token")
    if not (claims.get("sub") or claims.get("user_id")):
        raise AuthError("Invalid token claims")

    logger.debug(f"✅ Token cryptographically verified for user: {claims.get('email')}")
    return claims


def get_or_create_profile(db: Session, uid: str, email: Optional[str], name: str = "") -> Profile:
    """Find the profile for an identity, creating it on first sight"""
    profile = db.query(Profile).filter(Profile.id == uid).first()
    if profile:
        if email and not profile.email:
            profile.email = email
            db.commit()
        return profile

    logger.info(f"🆕 Creating new profile: {email or uid}")
    profile = Profile(id=uid, email=email, full_name=name or None)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


async def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Profile:
    """Resolve the caller's profile from the Firebase bearer token"""
    if settings.auth_bypass:
        return get_or_create_profile(db, LOCAL_PROFILE_ID, "dev@localhost", "Local Developer")

    if not credentials:
        raise AuthError(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    claims = await verify_firebase_token(credentials.credentials, settings.firebase_project_id)
    uid = claims.get("sub") or claims.get("user_id")
    return get_or_create_profile(db, uid, claims.get("email"), claims.get("name", ""))


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Optional[dict]:
    """Verified token claims when a valid bearer token is present, otherwise None"""
    if settings.auth_bypass:
        return {"sub": LOCAL_PROFILE_ID, "email": None}

    if not credentials:
        return None

    try:
        return await verify_firebase_token(credentials.credentials, settings.firebase_project_id)
    except AuthError as e:
        logger.info(f"No authenticated user found ({e.message}), continuing as guest")
        return None
