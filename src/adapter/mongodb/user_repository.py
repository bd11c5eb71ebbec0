"""MongoDB implementation of UserRepository.

One document per user; todos are embedded as an ordered array so the
whole aggregate is written by a single replace_one.
"""

from logging import getLogger
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateEmailError, PersistenceError
from domain.model.user import Todo, User

logger = getLogger(__name__)


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            # Anonymous users have no email, so uniqueness only covers string emails
            create_index_safe(
                self.collection, [('email', 1)], 'idx_users_email',
                unique=True, partialFilterExpression={'email': {'$type': 'string'}},
            )
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── helpers ──────────────────────────────────────────────

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            email=doc.get('email'),
            password_hash=doc.get('password_hash'),
            created_at=doc['created_at'],
            last_seen_at=doc['last_seen_at'],
            todos=[
                Todo(
                    id=t['id'],
                    title=t['title'],
                    description=t['description'],
                    completed=t['completed'],
                    created_at=t['created_at'],
                    updated_at=t['updated_at'],
                )
                for t in doc.get('todos', [])
            ],
        )

    def _to_document(self, user: User) -> dict:
        doc = {
            '_id': user.id,
            'password_hash': user.password_hash,
            'created_at': user.created_at,
            'last_seen_at': user.last_seen_at,
            'todos': [
                {
                    'id': t.id,
                    'title': t.title,
                    'description': t.description,
                    'completed': t.completed,
                    'created_at': t.created_at,
                    'updated_at': t.updated_at,
                }
                for t in user.todos
            ],
        }
        if user.email is not None:
            doc['email'] = user.email
        return doc

    # ── write operations ─────────────────────────────────────

    def add(self, user: User) -> None:
        """Insert a new user; the unique email index decides concurrent signups."""
        try:
            self.collection.insert_one(self._to_document(user))
        except DuplicateKeyError:
            logger.warning("User creation failed: email already exists", extra={"email": user.email})
            raise DuplicateEmailError(user.email)
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"userId": user.id, "error": str(e)})
            raise PersistenceError("Failed to create user") from e
        logger.info("User created", extra={"userId": user.id})

    def save(self, user: User) -> None:
        """Replace the whole user document, todos included."""
        try:
            self.collection.replace_one({'_id': user.id}, self._to_document(user), upsert=True)
        except DuplicateKeyError:
            raise DuplicateEmailError(user.email)
        except PyMongoError as e:
            logger.error("Failed to save user", extra={"userId": user.id, "error": str(e)})
            raise PersistenceError("Failed to save user") from e
        logger.debug("User saved", extra={"userId": user.id, "todos": len(user.todos)})

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'email': email})
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"error": str(e)})
            raise PersistenceError("Failed to load user") from e
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError("Failed to load user") from e
        return self._to_domain(doc) if doc else None
