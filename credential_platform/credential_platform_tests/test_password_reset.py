from credential_platform.credential_platform.credential_service.models import User
from credential_platform.credential_platform.credential_service.auth import hash_password


def ensure_user(db, email="user@example.com", username="user", password="Secret123!"):
    u = db.query(User).filter(User.username == username).first()
    if not u:
        u = User(username=username, email=email, password=hash_password(password))
        db.add(u)
        db.commit()
    # return stable scalar values
    return {"username": username, "email": email}


def test_password_reset_updates_password(client, db_session):
    user_info = ensure_user(db_session, password="OldPass1!")

    resp = client.post("/reset-password-data", json={
        "email": user_info["email"],
        "newPassword": "NewPass2!",
        "confirmNewPassword": "NewPass2!",
    })
    assert resp.status_code == 200
    assert resp.json() == {"message": "Password reset successfully"}

    old = client.post("/api/login", json={"email": user_info["email"], "password": "OldPass1!"})
    assert old.status_code == 401
    new = client.post("/api/login", json={"email": user_info["email"], "password": "NewPass2!"})
    assert new.status_code == 200


def test_password_reset_unknown_email_creates_nothing(client, db_session):
    ensure_user(db_session)

    resp = client.post("/api/forgot-password", json={
        "email": "ghost@example.com",
        "newPassword": "x1",
        "confirmNewPassword": "x1",
    })
    assert resp.status_code == 404
    assert resp.json() == {"error": "Email not found"}
    assert db_session.query(User).count() == 1
    assert db_session.query(User).filter(User.email == "ghost@example.com").first() is None


def test_password_reset_mismatch(client, db_session):
    user_info = ensure_user(db_session, password="OldPass1!")

    resp = client.post("/api/reset-password", json={
        "email": user_info["email"],
        "newPassword": "NewPass2!",
        "confirmNewPassword": "Different3!",
    })
    assert resp.status_code == 400
    assert resp.json() == {"error": "Passwords do not match"}

    still_old = client.post("/api/login", json={"email": user_info["email"], "password": "OldPass1!"})
    assert still_old.status_code == 200


def test_password_reset_missing_fields(client):
    resp = client.post("/api/reset-password", json={"email": "user@example.com"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "All fields are required"}


def test_password_reset_changes_only_password(client, db_session):
    ensure_user(db_session)
    before = db_session.query(User).filter(User.email == "user@example.com").first()
    snapshot = (before.id, before.username, before.email, before.profile_image, before.created_at, before.password)

    client.post("/api/reset-password", json={
        "email": "user@example.com", "newPassword": "Another!3", "confirmNewPassword": "Another!3"
    })

    db_session.expire_all()
    after = db_session.query(User).filter(User.email == "user@example.com").first()
    assert (after.id, after.username, after.email, after.profile_image, after.created_at) == snapshot[:5]
    assert after.password != snapshot[5]
