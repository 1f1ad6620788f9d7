import asyncio

import bcrypt

# bcrypt rejects longer input instead of truncating it
MAX_PASSWORD_BYTES = 72


async def hash_password(password: str, rounds: int = 12) -> str:
    """Salted bcrypt hash, computed off the event loop"""
    password_hash = await asyncio.to_thread(
        bcrypt.hashpw, password.encode(), bcrypt.gensalt(rounds)
    )
    return password_hash.decode()
