"""MongoDB implementations of the user, provider-binding and profile repositories."""

from logging import getLogger

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import (
    USER_PROFILES_COLLECTION_NAME,
    USER_PROVIDERS_COLLECTION_NAME,
    USERS_COLLECTION_NAME,
)
from domain.model.errors import DuplicateError, ErrorKind, PersistenceError
from domain.model.user import User, UserProfile, UserProvider, provider_key

logger = getLogger(__name__)


# ── document mapping ─────────────────────────────────────


def _provider_to_doc(provider: UserProvider) -> dict:
    return {
        '_id': provider.id,
        'user_id': provider.user_id,
        'provider': provider_key(provider.provider),
        'provider_id': provider.provider_id,
        'password_hash': provider.password_hash,
        'created_at': provider.created_at,
    }


def _provider_to_domain(doc: dict) -> UserProvider:
    return UserProvider(
        id=doc['_id'],
        user_id=doc['user_id'],
        provider=doc['provider'],
        provider_id=doc['provider_id'],
        created_at=doc['created_at'],
        password_hash=doc.get('password_hash'),
    )


def _profile_to_doc(user_id: str, profile: UserProfile) -> dict:
    # user_id doubles as _id: at most one profile per user
    return {
        '_id': user_id,
        'user_id': user_id,
        'name': profile.name,
        'avatar_url': profile.avatar_url,
    }


def _profile_to_domain(doc: dict) -> UserProfile:
    return UserProfile(
        user_id=doc['user_id'],
        name=doc['name'],
        avatar_url=doc.get('avatar_url'),
    )


class MongoUserProviderRepository:
    def __init__(self, db: Database):
        self.collection = db[USER_PROVIDERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(
                self.collection, [('provider', 1), ('provider_id', 1)],
                'idx_providers_provider_key', unique=True,
            )
            create_index_safe(self.collection, [('user_id', 1)], 'idx_providers_user_id')
            return True
        except PyMongoError as e:
            logger.error("Failed to create user_providers indexes", extra={"error": str(e)})
            return False

    def find(self, provider: str, provider_id: str) -> UserProvider | None:
        try:
            doc = self.collection.find_one({'provider': provider_key(provider), 'provider_id': provider_id})
        except PyMongoError as e:
            logger.error("Failed to find provider binding", extra={"provider": provider_key(provider), "error": str(e)})
            raise PersistenceError() from e
        return _provider_to_domain(doc) if doc else None

    def create(self, user_id: str, provider: UserProvider) -> UserProvider:
        provider.user_id = user_id
        try:
            self.collection.insert_one(_provider_to_doc(provider))
        except DuplicateKeyError as e:
            logger.warning(
                "Provider binding already exists",
                extra={"provider": provider.provider, "userId": user_id},
            )
            raise DuplicateError(message="Provider binding already exists") from e
        except PyMongoError as e:
            logger.error("Failed to create provider binding", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError() from e
        logger.info("Provider binding created", extra={"userId": user_id, "provider": provider.provider})
        return provider


class MongoUserProfileRepository:
    def __init__(self, db: Database):
        self.collection = db[USER_PROFILES_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        # _id is the user id; nothing else is queried
        return True

    def create(self, user_id: str, profile: UserProfile) -> UserProfile:
        profile.user_id = user_id
        try:
            self.collection.insert_one(_profile_to_doc(user_id, profile))
        except DuplicateKeyError as e:
            raise DuplicateError(message="Profile already exists") from e
        except PyMongoError as e:
            logger.error("Failed to create profile", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError() from e
        return profile

    def get_by_user_id(self, user_id: str) -> UserProfile | None:
        try:
            doc = self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get profile", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError() from e
        return _profile_to_domain(doc) if doc else None


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]
        self.providers = MongoUserProviderRepository(db)
        self.profiles = MongoUserProfileRepository(db)

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model (profile attached)."""
        return User(
            id=doc['_id'],
            email=doc['email'],
            created_at=doc['created_at'],
            updated_at=doc.get('updated_at'),
            profile=self.profiles.get_by_user_id(doc['_id']),
        )

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        try:
            self.collection.insert_one({
                '_id': user.id,
                'email': user.email,
                'created_at': user.created_at,
                'updated_at': user.updated_at,
            })
        except DuplicateKeyError as e:
            logger.warning("User creation failed: email already exists", extra={"userId": user.id})
            raise DuplicateError(ErrorKind.EMAIL_ALREADY_EXISTS) from e
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"userId": user.id, "error": str(e)})
            raise PersistenceError(ErrorKind.CREATING_USER) from e

        logger.info("User created", extra={"userId": user.id})
        return user

    def create_with_provider(
        self,
        user: User,
        provider: UserProvider,
        profile: UserProfile | None = None,
    ) -> User:
        """Insert user, binding and profile; undo earlier inserts if a later one fails.

        Compensating deletes stand in for a multi-document transaction so
        this also works on a standalone (non-replica-set) server.
        """
        self.create(user)
        try:
            self.providers.create(user.id, provider)
            if profile is not None:
                self.profiles.create(user.id, profile)
                user.profile = profile
        except (DuplicateError, PersistenceError):
            self._rollback(user.id, provider.id)
            raise
        return user

    def _rollback(self, user_id: str, provider_doc_id: str) -> None:
        try:
            self.providers.collection.delete_one({'_id': provider_doc_id})
            self.collection.delete_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to roll back partial user creation", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError(ErrorKind.CREATING_USER) from e
        logger.warning("Rolled back partial user creation", extra={"userId": user_id})

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'email': email})
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"error": str(e)})
            raise PersistenceError() from e
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError() from e
        return self._to_domain(doc) if doc else None

    def get_by_provider(self, provider: str, provider_id: str) -> User | None:
        binding = self.providers.find(provider, provider_id)
        if binding is None:
            return None
        return self.get_by_id(binding.user_id)
