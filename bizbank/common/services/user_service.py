from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from bizbank.common.database.db_connector import get_dialect_insert
from bizbank.common.models.user import User
from bizbank.common.schemas.user import UserUpsert
from bizbank.common.utils.time_utils import utcnow
import logging

logger = logging.getLogger(__name__)

class UserService:
    def get_user_by_id(self, db: Session, user_id: str):
        logger.debug(f"get_user_by_id 호출: user_id={user_id}")
        return db.query(User).filter(User.id == user_id).first()

    def upsert_user(self, db: Session, user: UserUpsert):
        """로그인 시 사용자를 생성하거나 프로필을 최신 값으로 갱신합니다."""
        logger.debug(f"upsert_user 호출: user_id={user.id}, auth_method={user.auth_method}")
        now = utcnow()
        values = user.model_dump()
        insert = get_dialect_insert(db)
        stmt = insert(User).values(**values, created_at=now, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "email": stmt.excluded.email,
                "first_name": stmt.excluded.first_name,
                "last_name": stmt.excluded.last_name,
                "auth_method": stmt.excluded.auth_method,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        try:
            db.execute(stmt)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"사용자 저장 실패: user_id={user.id}, error={e}", exc_info=True)
            raise
        logger.info(f"사용자 저장 성공: user_id={user.id}")
        return self.get_user_by_id(db, user.id)

def get_user_service():
    return UserService()
