from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.core.cache import CacheRegistry
from app.core.database import get_db
from app.core.security import decode_access_token
from app.crud.user import user as user_crud
from app.schemas.scope import ScopeContext
from app.schemas.token import TokenPayload
from app.services.analytics import AnalyticsService
from app.services.cache_service import CacheService
from app.services.institute import InstituteService
from app.services.user import UserService
from app.services.video import VideoService
from app.services.zone import ZoneService

http_bearer = HTTPBearer()

def get_caches(request: Request) -> CacheRegistry:
    return request.app.state.caches

def get_scope_context(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer)
) -> ScopeContext:
    """Resolve the authenticated caller into the scope every read and write is filtered by."""
    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload(**payload)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    if token_data.user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    user = user_crud.get(db, id=token_data.user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    # A role change since the token was issued invalidates it.
    if token_data.role is not None and token_data.role != user.role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token role is out of date"
        )

    return ScopeContext(
        caller_id=user.id,
        role=user.role,
        tenant_id=user.institute_id,
        region_id=user.zone_id,
    )

def get_cache_service(caches: CacheRegistry = Depends(get_caches)) -> CacheService:
    return CacheService(caches)

def get_video_service(db: Session = Depends(get_db), caches: CacheRegistry = Depends(get_caches)) -> VideoService:
    return VideoService(db, caches)

def get_user_service(db: Session = Depends(get_db), caches: CacheRegistry = Depends(get_caches)) -> UserService:
    return UserService(db, caches)

def get_institute_service(db: Session = Depends(get_db), caches: CacheRegistry = Depends(get_caches)) -> InstituteService:
    return InstituteService(db, caches)

def get_zone_service(db: Session = Depends(get_db), caches: CacheRegistry = Depends(get_caches)) -> ZoneService:
    return ZoneService(db, caches)

def get_analytics_service(db: Session = Depends(get_db), caches: CacheRegistry = Depends(get_caches)) -> AnalyticsService:
    return AnalyticsService(db, caches)

def get_current_super_admin(context: ScopeContext = Depends(get_scope_context)) -> ScopeContext:
    if not context.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required."
        )
    return context
