from app.services.patient_service import create_patient, list_patients


async def test_search_matches_phone(session, clinic) -> None:
    cid = clinic.company.id
    await create_patient(session, cid, {"name": "Diego Rocha", "phone": "(11) 98765-4321"})
    await create_patient(session, cid, {"name": "Elisa Prado", "phone": "(21) 91234-0000"})
    await session.commit()

    rows, total = await list_patients(session, cid, search="98765")

    assert total == 1
    assert [p.name for p in rows] == ["Diego Rocha"]


async def test_search_is_scoped_to_company(session, clinic) -> None:
    await create_patient(session, clinic.other_company.id, {"name": "Fabio Reis", "phone": "555-0101"})
    await session.commit()

    rows, total = await list_patients(session, clinic.company.id, search="555")

    assert total == 0
    assert rows == []
