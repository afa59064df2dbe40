import promote_admin

from culturepass_api.app.schemas.user import Role
from culturepass_api.app.services.user_service import UserService

from helpers import run


def test_promotes_existing_user(database, make_user):
    user = make_user("priya")
    assert promote_admin.main(["--db", str(database), "--username", "priya"]) == 0
    assert run(UserService.get_user_by_id(user.id)).role == Role.ADMIN


def test_demotes_with_role_flag(database, make_user):
    user = make_user("priya")
    run(UserService.set_role(user.id, Role.ADMIN))
    assert promote_admin.main(["--db", str(database), "--username", "priya", "--role", "user"]) == 0
    assert run(UserService.get_user_by_id(user.id)).role == Role.USER


def test_missing_database_exits_1(tmp_path):
    assert promote_admin.main(["--db", str(tmp_path / "nope.db"), "--username", "priya"]) == 1


def test_unknown_user_exits_2(database, capsys):
    assert promote_admin.main(["--db", str(database), "--username", "ghost"]) == 2
    assert "ghost" in capsys.readouterr().err
