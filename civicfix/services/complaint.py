from __future__ import annotations
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from sqlalchemy import Integer, Text, create_engine, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from civicfix.errors import StorageError

DEFAULT_STATUS = "Pending"
MAX_IMAGES = 3
COMPLAINT_FIELDS = ("name", "email", "phone", "category", "description", "location")


class Base(DeclarativeBase):
    pass


class Complaint(Base):
    __tablename__ = "complaints"
    # ids are never reused
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    location: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[Optional[str]] = mapped_column(Text, default=DEFAULT_STATUS, server_default=DEFAULT_STATUS)
    # comma-joined public paths, NULL when nothing was uploaded
    image_paths: Mapped[Optional[str]] = mapped_column("imagePaths", Text)
    created_at: Mapped[Optional[str]] = mapped_column("createdAt", Text, server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "category": self.category,
            "description": self.description,
            "location": self.location,
            "status": self.status,
            "imagePaths": self.image_paths,
            "createdAt": self.created_at,
        }


class ComplaintStore:
    """SQLite-backed store for complaint rows.

    The store must be opened before use; ``open`` creates the table when it
    does not exist yet, so it is safe to call on every startup.
    """

    def __init__(self, database_path: str | Path) -> None:
        self.database_path = Path(database_path)
        self._engine: Optional[Engine] = None

    def open(self) -> None:
        if self._engine is not None:
            return
        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(f"sqlite:///{self.database_path}")
            Base.metadata.create_all(engine)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"Could not open database at {self.database_path}: {exc}") from exc
        self._engine = engine

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def _session(self) -> Session:
        if self._engine is None:
            raise StorageError("Complaint store is not open")
        return Session(self._engine, expire_on_commit=False)

    def insert(self, fields: Mapping[str, Optional[str]], image_paths: Sequence[str] = ()) -> int:
        """Append a new complaint with status Pending and return its id.

        Keys of ``fields`` outside the complaint columns are ignored and
        missing ones are stored as NULL.
        """
        if len(image_paths) > MAX_IMAGES:
            raise StorageError(f"A complaint holds at most {MAX_IMAGES} images, got {len(image_paths)}")

        row = Complaint(
            **{key: fields.get(key) for key in COMPLAINT_FIELDS},
            status=DEFAULT_STATUS,
            image_paths=",".join(image_paths) if image_paths else None,
        )
        try:
            with self._session() as session, session.begin():
                session.add(row)
                session.flush()
                return row.id
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not insert complaint: {exc}") from exc

    def list_all(self) -> List[Complaint]:
        """Every complaint, newest (highest id) first."""
        try:
            with self._session() as session:
                return list(session.scalars(select(Complaint).order_by(Complaint.id.desc())))
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not list complaints: {exc}") from exc

    def update_status(self, complaint_id: int, new_status: Optional[str]) -> bool:
        # No existence check: an unknown id is a successful no-op.
        try:
            with self._session() as session, session.begin():
                session.execute(
                    update(Complaint).where(Complaint.id == complaint_id).values(status=new_status)
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not update complaint {complaint_id}: {exc}") from exc
        return True
