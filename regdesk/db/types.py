# regdesk/db/types.py

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from regdesk.core.security import decrypt_value, encrypt_value


class EncryptedString(TypeDecorator):
    """Text column whose value is encrypted on the way in and decrypted on the way out.

    Domain code only ever sees plain strings; ciphertext lives in the database.
    The ciphertext is non-deterministic, so these columns cannot be filtered on:
    pair them with a lookup-hash column when exact matching is needed.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return encrypt_value(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decrypt_value(value)
