"""
SQL persistence through SQLAlchemy.

Stores rules, custom keywords, keyword rules, learned patterns and
corrections in a relational database. Each store owns its engine.

Usage
-----
store = SqlStore("postgresql+psycopg://user@host/bookkeeping")

with store.session_scope() as s:
    s.execute(...)
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .port import PersistenceError, PersistencePort
from ..learning.models import (
    Correction,
    CustomKeyword,
    CustomKeywordRule,
    LearnedPattern,
    clamp_confidence,
    normalize_keywords,
    utc_now,
)
from ..patterns.transaction_patterns import RULE_CLASS_PRIORITIES, SYSTEM_RULES

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Base(DeclarativeBase):
    pass


# ---------------------------
# bk_rules
# ---------------------------


class RuleRow(Base):
    __tablename__ = "bk_rules"

    # Autoincrement id preserves declaration order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rule_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    pattern: Mapped[str] = mapped_column(Text, nullable=False)
    match_type: Mapped[str] = mapped_column(String(16), nullable=False, default="regex")
    merchant: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category_code: Mapped[str] = mapped_column(String(32), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rule_class: Mapped[str] = mapped_column(String(32), nullable=False)


# ---------------------------
# bk_custom_keywords / bk_keyword_rules
# ---------------------------


class CustomKeywordRow(Base):
    __tablename__ = "bk_custom_keywords"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)
    category_code: Mapped[str] = mapped_column(String(32), nullable=False)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class KeywordRuleRow(Base):
    __tablename__ = "bk_keyword_rules"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    keywords: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    category_code: Mapped[str] = mapped_column(String(32), nullable=False)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------
# bk_learned_patterns / bk_corrections
# ---------------------------


class LearnedPatternRow(Base):
    __tablename__ = "bk_learned_patterns"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    category_code: Mapped[str] = mapped_column(String(32), nullable=False)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_used_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CorrectionRow(Base):
    __tablename__ = "bk_corrections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    original_description: Mapped[str] = mapped_column(Text, nullable=False)
    category_code: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlStore(PersistencePort):
    """Relational store backed by SQLAlchemy."""

    def __init__(
        self,
        database_url: str,
        create_tables: bool = True,
        seed_rules: bool = True,
        **engine_kwargs: Any
    ):
        """
        Initialize the store.

        Args:
            database_url: SQLAlchemy database URL
            create_tables: Create missing tables on startup
            seed_rules: Populate an empty rule table with the packaged rules
            engine_kwargs: Extra arguments for create_engine

        Raises:
            PersistenceError: If the database cannot be reached or prepared
        """
        if not database_url:
            raise PersistenceError("database_url is required for SqlStore")
        engine_kwargs.setdefault("pool_pre_ping", True)
        try:
            self.engine = create_engine(database_url, **engine_kwargs)
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False, class_=Session)
            if create_tables:
                Base.metadata.create_all(self.engine)
            if seed_rules:
                self._seed_rules()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Cannot initialize SQL store: {e}") from e
        logger.info(f"SQL store ready ({self.engine.url.get_backend_name()})")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        try:
            with self.session_scope() as session:
                return work(session)
        except SQLAlchemyError as e:
            raise PersistenceError(f"{operation} failed: {e}") from e

    def _seed_rules(self) -> None:
        with self.session_scope() as session:
            count = session.scalar(select(func.count()).select_from(RuleRow))
            if count:
                return
            for entry in SYSTEM_RULES:
                session.add(RuleRow(
                    rule_id=entry["id"],
                    pattern=entry["pattern"],
                    match_type=entry.get("match_type", "regex"),
                    merchant=entry.get("merchant"),
                    category_code=entry["category_code"],
                    confidence=entry["confidence"],
                    priority=entry.get("priority") or RULE_CLASS_PRIORITIES[entry["rule_class"]],
                    rule_class=entry["rule_class"],
                ))
        logger.info(f"Seeded {len(SYSTEM_RULES)} rules into bk_rules")

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def load_rule_catalog(self) -> List[Dict]:
        def work(session: Session) -> List[Dict]:
            rows = session.scalars(select(RuleRow).order_by(RuleRow.id)).all()
            return [
                {
                    "id": row.rule_id,
                    "pattern": row.pattern,
                    "match_type": row.match_type,
                    "merchant": row.merchant,
                    "category_code": row.category_code,
                    "confidence": row.confidence,
                    "priority": row.priority,
                    "rule_class": row.rule_class,
                }
                for row in rows
            ]
        return self._run("load_rule_catalog", work)

    # ------------------------------------------------------------------
    # Custom keywords
    # ------------------------------------------------------------------

    def load_custom_keywords(self) -> List[CustomKeyword]:
        def work(session: Session) -> List[CustomKeyword]:
            keywords = []
            for row in session.scalars(select(CustomKeywordRow).order_by(CustomKeywordRow.created_at)):
                if not row.keyword.strip():
                    logger.warning(f"Skipping empty custom keyword {row.id}")
                    continue
                keywords.append(CustomKeyword(
                    keyword_id=row.id,
                    keyword=row.keyword,
                    category_code=row.category_code,
                    confidence=clamp_confidence(row.confidence),
                    description=row.description,
                    created_at=_aware(row.created_at),
                    updated_at=_aware(row.updated_at),
                ))
            return keywords
        return self._run("load_custom_keywords", work)

    def save_custom_keyword(self, keyword: CustomKeyword) -> None:
        def work(session: Session) -> None:
            row = session.get(CustomKeywordRow, keyword.keyword_id)
            if row is None:
                row = CustomKeywordRow(id=keyword.keyword_id, created_at=keyword.created_at)
                session.add(row)
            row.keyword = keyword.keyword
            row.category_code = keyword.category_code
            row.confidence = keyword.confidence
            row.description = keyword.description
            row.updated_at = keyword.updated_at
        self._run("save_custom_keyword", work)

    def delete_custom_keyword(self, keyword_id: str) -> None:
        self._run(
            "delete_custom_keyword",
            lambda session: session.execute(delete(CustomKeywordRow).where(CustomKeywordRow.id == keyword_id)),
        )

    def load_keyword_rules(self) -> List[CustomKeywordRule]:
        def work(session: Session) -> List[CustomKeywordRule]:
            rules = []
            for row in session.scalars(select(KeywordRuleRow).order_by(KeywordRuleRow.created_at)):
                keywords = normalize_keywords(row.keywords or [])
                if not keywords:
                    logger.warning(f"Skipping keyword rule {row.id} with no keywords")
                    continue
                rules.append(CustomKeywordRule(
                    rule_id=row.id,
                    keywords=keywords,
                    category_code=row.category_code,
                    confidence=clamp_confidence(row.confidence),
                    description=row.description,
                    created_at=_aware(row.created_at),
                    updated_at=_aware(row.updated_at),
                ))
            return rules
        return self._run("load_keyword_rules", work)

    def save_keyword_rule(self, rule: CustomKeywordRule) -> None:
        def work(session: Session) -> None:
            row = session.get(KeywordRuleRow, rule.rule_id)
            if row is None:
                row = KeywordRuleRow(id=rule.rule_id, created_at=rule.created_at)
                session.add(row)
            row.keywords = list(rule.keywords)
            row.category_code = rule.category_code
            row.confidence = rule.confidence
            row.description = rule.description
            row.updated_at = rule.updated_at
        self._run("save_keyword_rule", work)

    def delete_keyword_rule(self, rule_id: str) -> None:
        self._run(
            "delete_keyword_rule",
            lambda session: session.execute(delete(KeywordRuleRow).where(KeywordRuleRow.id == rule_id)),
        )

    # ------------------------------------------------------------------
    # Learned patterns and corrections
    # ------------------------------------------------------------------

    def load_learned_patterns(self) -> List[LearnedPattern]:
        def work(session: Session) -> List[LearnedPattern]:
            patterns = []
            for row in session.scalars(select(LearnedPatternRow).order_by(LearnedPatternRow.created_at)):
                patterns.append(LearnedPattern(
                    key=row.key,
                    category_code=row.category_code,
                    confidence=clamp_confidence(row.confidence),
                    usage_count=max(0, row.usage_count),
                    last_used_at=_aware(row.last_used_at),
                    created_at=_aware(row.created_at),
                ))
            return patterns
        return self._run("load_learned_patterns", work)

    def save_learned_pattern(self, key: str, category_code: str, confidence: int) -> None:
        def work(session: Session) -> None:
            now = utc_now()
            row = session.get(LearnedPatternRow, key)
            if row is None:
                session.add(LearnedPatternRow(
                    key=key,
                    category_code=category_code,
                    confidence=clamp_confidence(confidence),
                    usage_count=1,
                    last_used_at=now,
                    created_at=now,
                ))
                return
            row.category_code = category_code
            row.confidence = clamp_confidence(confidence)
            row.usage_count = row.usage_count + 1
            row.last_used_at = now
        self._run("save_learned_pattern", work)

    def record_correction(self, description: str, category_code: str) -> None:
        self._run(
            "record_correction",
            lambda session: session.add(CorrectionRow(
                original_description=description,
                category_code=category_code,
                created_at=utc_now(),
            )),
        )

    def load_corrections(self) -> List[Correction]:
        def work(session: Session) -> List[Correction]:
            rows = session.scalars(select(CorrectionRow).order_by(CorrectionRow.id)).all()
            return [
                Correction(
                    original_description=row.original_description,
                    category_code=row.category_code,
                    timestamp=_aware(row.created_at),
                )
                for row in rows
            ]
        return self._run("load_corrections", work)

    def clear_all(self) -> None:
        def work(session: Session) -> None:
            for model in (CustomKeywordRow, KeywordRuleRow, LearnedPatternRow, CorrectionRow):
                session.execute(delete(model))
        self._run("clear_all", work)
        logger.info("Cleared SQL store")

    def close(self) -> None:
        self.engine.dispose()
