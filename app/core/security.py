from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


# ---------- PASSWORD ENCRYPTION ----------
def hash_password(password: str):
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str):
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # malformed / unknown hash format
        return False
