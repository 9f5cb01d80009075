# Token helpers
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

ALGORITHM = 'HS256'


def create_access_token(user, secret, expiry_days=7):
    """Signed bearer token carrying the user id and role"""
    expire = datetime.now(timezone.utc) + timedelta(days=expiry_days)
    to_encode = {'sub': str(user.id), 'role': user.role, 'exp': expire}
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def decode_access_token(token, secret):
    """Return the user id from a token, or None when it is invalid or expired"""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    subject = payload.get('sub')
    if subject is None:
        return None
    try:
        return int(subject)
    except ValueError:
        return None


def bearer_token(header_value):
    if not header_value:
        return None
    scheme, _, token = header_value.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
