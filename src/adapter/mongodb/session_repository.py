"""MongoDB implementation of SessionRepository."""

from datetime import datetime
from logging import getLogger

from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import SESSIONS_COLLECTION_NAME
from domain.model.errors import DuplicateError, PersistenceError
from domain.model.session import Session

logger = getLogger(__name__)


class MongoSessionRepository:
    def __init__(self, db: Database):
        self.collection = db[SESSIONS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for sessions collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(
                self.collection, [('refresh_token_hash', 1)],
                'idx_sessions_refresh_token_hash', unique=True,
            )
            create_index_safe(
                self.collection, [('user_id', 1), ('created_at', -1)],
                'idx_sessions_user_created',
            )
            return True
        except PyMongoError as e:
            logger.error("Failed to create sessions indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> Session:
        return Session(
            id=doc['_id'],
            user_id=doc['user_id'],
            refresh_token_hash=doc['refresh_token_hash'],
            created_at=doc['created_at'],
            user_agent=doc.get('user_agent'),
            ip_address=doc.get('ip_address'),
            expires_at=doc.get('expires_at'),
            revoked_at=doc.get('revoked_at'),
        )

    def create(self, session: Session) -> Session:
        doc = {
            '_id': session.id,
            'user_id': session.user_id,
            'refresh_token_hash': session.refresh_token_hash,
            'user_agent': session.user_agent,
            'ip_address': session.ip_address,
            'expires_at': session.expires_at,
            'revoked_at': session.revoked_at,
            'created_at': session.created_at,
        }
        try:
            self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateError(message="Refresh token already in use") from e
        except PyMongoError as e:
            logger.error("Failed to create session", extra={"userId": session.user_id, "error": str(e)})
            raise PersistenceError() from e

        logger.info("Session created", extra={"userId": session.user_id, "sessionId": session.id})
        return session

    def find_by_refresh_token_hash(self, refresh_token_hash: str) -> Session | None:
        try:
            doc = self.collection.find_one({'refresh_token_hash': refresh_token_hash})
        except PyMongoError as e:
            logger.error("Failed to find session", extra={"error": str(e)})
            raise PersistenceError() from e
        return self._to_domain(doc) if doc else None

    def revoke(self, session_id: str, revoked_at: datetime) -> bool:
        """Stamp revoked_at once; the filter makes concurrent revokes race-free."""
        try:
            result = self.collection.update_one(
                {'_id': session_id, 'revoked_at': None},
                {'$set': {'revoked_at': revoked_at}},
            )
        except PyMongoError as e:
            logger.error("Failed to revoke session", extra={"sessionId": session_id, "error": str(e)})
            raise PersistenceError() from e

        if result.modified_count == 0:
            return False
        logger.info("Session revoked", extra={"sessionId": session_id})
        return True

    def list_by_user(self, user_id: str) -> list[Session]:
        try:
            cursor = self.collection.find({'user_id': user_id}).sort('created_at', DESCENDING)
            return [self._to_domain(doc) for doc in cursor]
        except PyMongoError as e:
            logger.error("Failed to list sessions", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError() from e
