import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import JWT_ALGORITHM, JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db
from .models import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer()


def verify_access_token(token: str) -> dict:
    """
    Verify a Supabase Auth access token and return its claims.
    Tokens are HS256 JWTs signed with the project's JWT secret.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        payload = jose_jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        logger.warning("⚠️ Expired access token")
        raise HTTPException(status_code=401, detail="Token expired") from e
    except JWTError as e:
        logger.warning(f"⚠️ JWT verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    if not payload.get("sub"):
        logger.error(f"❌ Token missing subject claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return payload


async def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Get the profile of the authenticated caller"""

    if not credentials:
        logger.error("❌ No credentials provided")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, token length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    claims = verify_access_token(token)
    profile_id = claims["sub"]

    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if profile:
        logger.debug(f"✅ Profile authenticated: {profile.email} ({profile.account_type})")
        return profile

    email = claims.get("email")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token claims")

    # First request after sign-up: every self-registered account starts as a resident.
    # Staff roles are granted by a municipal administrator, never taken from the token.
    metadata = claims.get("user_metadata") or {}
    logger.info(f"🆕 Creating profile for {email}")
    profile = Profile(
        id=profile_id,
        email=email,
        first_name=metadata.get("first_name"),
        last_name=metadata.get("last_name"),
        account_type="resident",
    )
    db.add(profile)
    try:
        db.commit()
        db.refresh(profile)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create profile for {email}: {str(e)}")
        raise HTTPException(status_code=409, detail="Profile already exists") from e

    return profile


async def get_municipal_profile(
    profile: Profile = Depends(get_current_profile),
) -> Profile:
    """Require a municipal staff (or super admin) account"""
    if not profile.is_municipal:
        logger.warning(f"⚠️ {profile.email} ({profile.account_type}) attempted a municipal-only action")
        raise HTTPException(status_code=403, detail="Municipal access required")
    return profile
