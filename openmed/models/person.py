from sqlalchemy import Column, Integer, String, Date, DateTime
from sqlalchemy.sql import func

from ..core.database import Base

class Person(Base):
    __tablename__ = "persons"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    firstname = Column(String(100), nullable=False)
    lastname = Column(String(100), nullable=False)
    birthdate = Column(Date, nullable=False)

    # Set once the account has been created; not a foreign key
    user_id = Column(Integer, nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Person(id={self.id}, name='{self.firstname} {self.lastname}', user_id={self.user_id})>"
