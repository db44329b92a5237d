from backend.routes.doctor_routes import list_doctors


def test_list_doctors_returns_seed_order(db_session, doctors) -> None:
    wong, smith = doctors

    assert [(doctor.id, doctor.name) for doctor in list_doctors(db=db_session)] == [
        (wong.id, 'Dr. Wong'),
        (smith.id, 'Dr. Smith'),
    ]
