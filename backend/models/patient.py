"""Patient model definitions."""

from sqlalchemy import Column, Date, Integer, String, Text

from backend.database import Base


class Patient(Base):
    """Demographic record for a patient."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    lastname = Column(String(100))
    firstname = Column(String(100))
    preferredname = Column(String(100))
    address = Column(Text)
    city = Column(String(100))
    postalcode = Column(String(20))
    province = Column(String(100))
    homephone = Column(String(20))
    workphone = Column(String(20))
    cellphone = Column(String(20))
    email = Column(String(150))
    dob = Column(Date)
    sex = Column(String(10))
    healthinsurance_number = Column(String(50))
    healthinsurance_version_code = Column(String(10))
    patient_status = Column(String(20), default='active')
    family_physician = Column(String(150))
