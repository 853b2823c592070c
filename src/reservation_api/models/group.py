from decimal import Decimal

from sqlalchemy import CheckConstraint, DDL, Integer, Numeric, event, func, literal_column
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reservation_api.database.base import Base
from reservation_api.domain.group import Group

OVERLAP_CONSTRAINT = "groups_no_overlap"


class GroupModel(Base):
    """
    SQLAlchemy model for a Group.

    The storage layer is authoritative for every Group invariant: named CHECK
    constraints for the positivity rules and `max_people > min_people`, plus
    an exclusion rule that no two rows have overlapping inclusive
    [min_people, max_people] ranges (a gist exclusion constraint on
    PostgreSQL, BEFORE INSERT/UPDATE triggers on SQLite).
    """
    __tablename__ = "groups"

    group_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    min_people: Mapped[int] = mapped_column(Integer, nullable=False)

    max_people: Mapped[int] = mapped_column(Integer, nullable=False)

    admission_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2, asdecimal=True),
        nullable=False,
    )

    start_interval: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("min_people > 0", name="min_people_positive"),
        CheckConstraint("max_people > 0", name="max_people_positive"),
        CheckConstraint("max_people > min_people", name="max_people_gt_min_people"),
        CheckConstraint("admission_price >= 0", name="admission_price_non_negative"),
        CheckConstraint("start_interval > 0", name="start_interval_positive"),
    )

    def to_domain(self) -> Group:
        return Group(
            group_id=self.group_id,
            min_people=self.min_people,
            max_people=self.max_people,
            admission_price=self.admission_price,
            start_interval=self.start_interval,
        )

    def __repr__(self) -> str:
        return f"<GroupModel(group_id={self.group_id}, people={self.min_people}-{self.max_people})>"


# Needs the mapped columns, so it is attached once the table exists.
GroupModel.__table__.append_constraint(
    ExcludeConstraint(
        (
            func.int4range(
                GroupModel.__table__.c.min_people,
                GroupModel.__table__.c.max_people,
                literal_column("'[]'"),
            ),
            "&&",
        ),
        name=OVERLAP_CONSTRAINT,
        using="gist",
    ).ddl_if(dialect="postgresql")
)


_SQLITE_OVERLAP_CHECK = """
CREATE TRIGGER {name}_{event} BEFORE {verb} ON "groups"
FOR EACH ROW
WHEN EXISTS (
    SELECT 1 FROM "groups" AS g
    WHERE g.min_people <= NEW.max_people
      AND NEW.min_people <= g.max_people
      {exclude_self}
)
BEGIN
    SELECT RAISE(ABORT, 'exclusion constraint violated: {name}');
END
"""

event.listen(
    GroupModel.__table__,
    "after_create",
    DDL(
        _SQLITE_OVERLAP_CHECK.format(
            name=OVERLAP_CONSTRAINT, event="insert", verb="INSERT", exclude_self=""
        )
    ).execute_if(dialect="sqlite"),
)

event.listen(
    GroupModel.__table__,
    "after_create",
    DDL(
        _SQLITE_OVERLAP_CHECK.format(
            name=OVERLAP_CONSTRAINT,
            event="update",
            verb="UPDATE",
            exclude_self="AND g.group_id <> OLD.group_id",
        )
    ).execute_if(dialect="sqlite"),
)
