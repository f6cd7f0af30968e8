from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from bizbank.common.database.db_connector import get_dialect_insert
from bizbank.common.models.company import Company
from bizbank.common.models.user import User
from bizbank.common.utils.time_utils import utcnow
import hashlib
import logging

logger = logging.getLogger(__name__)


def demo_org_number(user_id: str) -> str:
    """사용자 ID에서 결정적으로 만든 9자리 데모 조직번호"""
    digest = int(hashlib.sha256(user_id.encode("utf-8")).hexdigest(), 16)
    return f"9{digest % 100_000_000:08d}"


class CompanyService:
    """
    회사는 사용자 소유입니다. 모든 사용자가 하나의 데모 회사를 공유하지 않으며,
    처음 조회할 때 해당 사용자의 데모 회사를 만듭니다.
    """

    def _find_company(self, db: Session, user_id: str):
        return db.query(Company).filter(Company.owner_user_id == user_id).first()

    def get_company_for_user(self, db: Session, user: User) -> Company:
        logger.debug(f"get_company_for_user 호출: user_id={user.id}")
        company = self._find_company(db, user.id)
        if company:
            return company

        display_name = " ".join(part for part in (user.first_name, user.last_name) if part) or user.id
        now = utcnow()
        insert = get_dialect_insert(db)
        # 동시 첫 조회에서 먼저 만든 쪽이 이김. 나머지는 아무 것도 하지 않고 다시 조회
        stmt = insert(Company).values(
            owner_user_id=user.id,
            name=f"{display_name} Demo AS",
            org_number=demo_org_number(user.id),
            country="NO",
            kyc_status="pending",
            created_at=now,
            updated_at=now,
        ).on_conflict_do_nothing(index_elements=["owner_user_id"])
        try:
            result = db.execute(stmt)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"데모 회사 생성 실패: user_id={user.id}, error={e}", exc_info=True)
            raise

        company = self._find_company(db, user.id)
        if result.rowcount:
            logger.info(f"데모 회사 생성: user_id={user.id}, company_id={company.id}, org_number={company.org_number}")
        else:
            logger.info(f"다른 요청이 먼저 데모 회사를 생성함: user_id={user.id}, company_id={company.id}")
        return company

def get_company_service():
    return CompanyService()
