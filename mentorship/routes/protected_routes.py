from fastapi import APIRouter, Depends

from mentorship.auth.dependencies import TokenIdentity, get_current_identity

router = APIRouter(tags=['protected'])


@router.get('')
def protected(identity: TokenIdentity = Depends(get_current_identity)):
    return {'message': 'Access granted to protected route', 'user': identity.as_payload()}
