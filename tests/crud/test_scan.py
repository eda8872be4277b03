# tests/crud/test_scan.py

from unittest.mock import MagicMock

from regdesk.crud.crud_scan import CRUDScan

scan_crud = CRUDScan()


def test_record_snapshots_registration_state():
    """
    The scan row copies the statuses the registration has at the time of the call.
    """
    db_session = MagicMock()
    registration = MagicMock(
        id="reg_1", badge_status_id=11, ticket_status_id=21, payment_status="paid"
    )

    scan = scan_crud.record(db_session, registration=registration, scanned_by="usr_1", target="badge")

    created_obj = db_session.add.call_args[0][0]
    assert created_obj is scan
    assert scan.registration_id == "reg_1"
    assert scan.badge_status_id == 11
    assert scan.ticket_status_id == 21
    assert scan.payment_status == "paid"
    assert scan.scanned_by == "usr_1"
    # The caller owns the transaction
    db_session.commit.assert_not_called()
