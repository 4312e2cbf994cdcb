"""
Base repository.
Generic row operations shared by every table.
"""
from typing import TypeVar, Generic, Optional, List, Type
from sqlmodel import Session, select

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository.

    Usage:
        class MyRepository(BaseRepository[MyModel]):
            def __init__(self, session: Session):
                super().__init__(session, MyModel)
    """

    def __init__(self, session: Session, model: Type[T]):
        """
        Args:
            session: Database session
            model: SQLModel table class
        """
        self.session = session
        self.model = model

    def get_by_id(self, id: str) -> Optional[T]:
        """
        Returns a row by primary key, or None.
        """
        return self.session.get(self.model, id)

    def get_all(self) -> List[T]:
        """
        Returns every row.
        """
        return list(self.session.exec(select(self.model)).all())

    def upsert_from_dict(self, id: str, data: dict) -> T:
        """
        Inserts the row or overwrites every given field of an existing one.

        Args:
            id: Primary key
            data: Full field set (None values are written too)

        Returns:
            The stored row
        """
        data = {key: value for key, value in data.items() if key != "id"}
        obj = self.get_by_id(id)
        if obj is None:
            obj = self.model(id=id, **data)
        else:
            for key, value in data.items():
                setattr(obj, key, value)
        return self.save(obj)

    def delete_by_id(self, id: str) -> bool:
        """
        Deletes a row by primary key.

        Returns:
            False when the row did not exist
        """
        obj = self.get_by_id(id)
        if obj is None:
            return False
        self.session.delete(obj)
        self.session.commit()
        return True

    def save(self, obj: T) -> T:
        """
        Saves changes on a row.
        """
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj
