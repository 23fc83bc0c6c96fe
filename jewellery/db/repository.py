from typing import Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from jewellery.db.session import Base

ModelT = TypeVar("ModelT", bound=Base)


class GenericRepository(Generic[ModelT]):
    """Create/read/update/delete helpers over one mapped entity.

    Writes commit by default. Pass ``commit=False`` to flush only and let the
    caller commit (or roll back) a larger unit of work.
    """

    def __init__(self, model: Type[ModelT], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, entity_id: int, for_update: bool = False) -> Optional[ModelT]:
        if for_update:
            stmt = select(self.model).where(self.model.id == entity_id).with_for_update()
            return self.db.scalars(stmt).first()
        return self.db.get(self.model, entity_id)

    def get_all(self) -> List[ModelT]:
        return list(self.db.scalars(select(self.model).order_by(self.model.id)))

    def find(self, *criteria) -> List[ModelT]:
        stmt = select(self.model).where(*criteria).order_by(self.model.id)
        return list(self.db.scalars(stmt))

    def first(self, *criteria) -> Optional[ModelT]:
        return self.db.scalars(select(self.model).where(*criteria).limit(1)).first()

    def get_all_with_includes(self, *criteria, includes: Sequence[str] = ()) -> List[ModelT]:
        """Query with eager-loaded relationships given as dotted paths, e.g. ``"order_items.product"``."""
        stmt = (
            select(self.model)
            .where(*criteria)
            .order_by(self.model.id)
            .execution_options(populate_existing=True)
        )
        for path in includes:
            stmt = stmt.options(self._load_path(path))
        return list(self.db.scalars(stmt))

    def add(self, entity: ModelT, commit: bool = True) -> ModelT:
        self.db.add(entity)
        self._save(entity, commit)
        return entity

    def add_all(self, entities: Iterable[ModelT], commit: bool = True) -> List[ModelT]:
        entities = list(entities)
        self.db.add_all(entities)
        if commit:
            self.db.commit()
        else:
            self.db.flush()
        return entities

    def update(self, entity: ModelT, commit: bool = True) -> ModelT:
        self._save(entity, commit)
        return entity

    def delete(self, entity: ModelT, commit: bool = True) -> None:
        self.db.delete(entity)
        if commit:
            self.db.commit()
        else:
            self.db.flush()

    def _save(self, entity: ModelT, commit: bool):
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()

    def _load_path(self, path: str):
        model = self.model
        option = None
        for name in path.split("."):
            attr = getattr(model, name)
            option = selectinload(attr) if option is None else option.selectinload(attr)
            model = attr.property.mapper.class_
        return option
