from typing import List, Optional
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import ImageInfo
from .....application.ports.image_repo import ImageRepository, StoredImage


class SqlImageRepository(ImageRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, row: ImageInfo) -> StoredImage:
        return StoredImage(
            id=row.id,
            file_name=row.file_name,
            original_file_name=row.original_file_name,
            file_extension=row.file_extension,
            file_size=row.file_size,
            width=row.width,
            height=row.height,
            mime_type=row.mime_type,
            upload_time=row.upload_time,
            description=row.description,
            category=row.category,
            is_public=row.is_public,
            owner_id=row.owner_id,
        )

    def create(self, *, file_name: str, original_file_name: str, file_extension: str, file_size: int,
               width: int, height: int, mime_type: str, owner_id: int,
               description: Optional[str] = None, category: Optional[str] = None) -> StoredImage:
        row = ImageInfo(
            file_name=file_name,
            original_file_name=original_file_name,
            file_extension=file_extension,
            file_size=file_size,
            width=width,
            height=height,
            mime_type=mime_type,
            owner_id=owner_id,
            description=description,
            category=category,
        )
        self.session.add(row)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(row)
        return self._to_dto(row)

    def get_by_id(self, image_id: int) -> Optional[StoredImage]:
        row = self.session.get(ImageInfo, image_id)
        return self._to_dto(row) if row else None

    def get_by_file_name(self, file_name: str) -> Optional[StoredImage]:
        row = self.session.exec(select(ImageInfo).where(ImageInfo.file_name == file_name)).first()
        return self._to_dto(row) if row else None

    def list_page(self, offset: int, limit: int, category: Optional[str] = None) -> List[StoredImage]:
        query = select(ImageInfo)
        if category:
            query = query.where(ImageInfo.category == category)
        query = query.order_by(ImageInfo.upload_time.desc(), ImageInfo.id.desc()).offset(offset).limit(limit)
        return [self._to_dto(row) for row in self.session.exec(query).all()]

    def list_for_owner(self, owner_id: int) -> List[StoredImage]:
        rows = self.session.exec(select(ImageInfo).where(ImageInfo.owner_id == owner_id)).all()
        return [self._to_dto(row) for row in rows]

    def count_for_owner(self, owner_id: int) -> int:
        return self.session.exec(
            select(func.count()).select_from(ImageInfo).where(ImageInfo.owner_id == owner_id)
        ).one()

    def delete(self, image_id: int) -> bool:
        row = self.session.get(ImageInfo, image_id)
        if not row:
            return False
        self.session.delete(row)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return True
