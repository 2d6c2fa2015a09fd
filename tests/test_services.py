"""
Тесты для Service Layer (Бизнес-логика).

Проверяем:
- Валидацию обязательных полей
- Теги по умолчанию при создании команды
- Идемпотентность join / attach / delete
- Правило "последний участник удаляет команду"
- Защиту от привязки чужого тега
"""

import pytest
from sqlalchemy import func, select

from tagger.core.exceptions import ConflictError, InternalError, NotFoundError, ValidationError
from tagger.models import CardTag, Member, Tag, Team
from tagger.services import DEFAULT_TAGS, CardTagService, TagService, TeamService


async def count_rows(db, model, **filters) -> int:
    stmt = select(func.count()).select_from(model)
    for field, value in filters.items():
        stmt = stmt.where(getattr(model, field) == value)
    return (await db.execute(stmt)).scalar_one()


# ============================================================================
# TEAM SERVICE TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_team_seeds_owner_and_default_tags(test_db):
    """Test: новая команда = 1 участник (создатель) + 6 тегов по умолчанию."""
    service = TeamService(test_db)

    team = await service.create_team(name="Engineering", user_id="u1", user_name="Alice")
    await test_db.commit()

    assert team.name == "Engineering"
    assert len(team.invite_code) == 6
    assert team.invite_code.isupper() or team.invite_code.isdigit()

    _, members = await service.get_team_details(team.id)
    assert [(m.user_id, m.name) for m in members] == [("u1", "Alice")]

    tags = await TagService(test_db).get_team_tags(team.id)
    assert [(t.name, t.color) for t in tags] == DEFAULT_TAGS
    assert [t.name for t in tags] == ["Urgent", "In Progress", "Review", "Done", "Blocked", "Bug"]


@pytest.mark.asyncio
async def test_create_team_default_owner_name(test_db):
    """Test: без userName создатель получает имя "Owner"."""
    service = TeamService(test_db)

    team = await service.create_team(name="Ops", user_id="u1")
    await test_db.commit()

    _, members = await service.get_team_details(team.id)
    assert members[0].name == "Owner"


@pytest.mark.asyncio
async def test_create_team_sanitizes_input(test_db):
    """Test: пробелы обрезаются, длина ограничивается."""
    service = TeamService(test_db)

    team = await service.create_team(name="  " + "N" * 150 + "  ", user_id="  u1  ")
    await test_db.commit()

    assert team.name == "N" * 100
    _, members = await service.get_team_details(team.id)
    assert members[0].user_id == "u1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name,user_id",
    [("", "u1"), ("Team", ""), ("   ", "u1"), (None, "u1"), ("Team", 123)],
)
async def test_create_team_validation(test_db, name, user_id):
    """Test: без названия или userId команда не создаётся."""
    service = TeamService(test_db)

    with pytest.raises(ValidationError, match="Team name and userId required"):
        await service.create_team(name=name, user_id=user_id)

    assert await count_rows(test_db, Team) == 0


@pytest.mark.asyncio
async def test_invite_codes_unique_across_teams(test_db):
    """Test: инвайт-коды разных команд различаются."""
    service = TeamService(test_db)

    codes = set()
    for i in range(20):
        team = await service.create_team(name=f"Team {i}", user_id="u1")
        codes.add(team.invite_code)
    await test_db.commit()

    assert len(codes) == 20


@pytest.mark.asyncio
async def test_join_team(test_db):
    """Test: вступление по коду, код не чувствителен к регистру."""
    service = TeamService(test_db)
    team = await service.create_team(name="Engineering", user_id="u1")
    await test_db.commit()

    result = await service.join_team(invite_code=team.invite_code.lower(), user_id="u2")
    await test_db.commit()

    assert result.team.id == team.id
    assert result.already_member is False

    _, members = await service.get_team_details(team.id)
    assert [m.user_id for m in members] == ["u1", "u2"]
    assert members[1].name == "Member"


@pytest.mark.asyncio
async def test_join_team_twice_is_idempotent(test_db):
    """Test: повторное вступление не ошибка и не создаёт дубликат."""
    service = TeamService(test_db)
    team = await service.create_team(name="Engineering", user_id="u1")
    await test_db.commit()

    await service.join_team(invite_code=team.invite_code, user_id="u2")
    await test_db.commit()
    result = await service.join_team(invite_code=team.invite_code, user_id="u2")
    await test_db.commit()

    assert result.already_member is True
    assert await count_rows(test_db, Member, team_id=team.id, user_id="u2") == 1


@pytest.mark.asyncio
async def test_join_team_invalid_code(test_db):
    """Test: неизвестный код → NotFoundError."""
    service = TeamService(test_db)

    with pytest.raises(NotFoundError, match="Invalid invite code"):
        await service.join_team(invite_code="NOPE00", user_id="u2")


@pytest.mark.asyncio
async def test_join_team_validation(test_db):
    """Test: без кода или userId → ValidationError."""
    service = TeamService(test_db)

    with pytest.raises(ValidationError):
        await service.join_team(invite_code="", user_id="u2")
    with pytest.raises(ValidationError):
        await service.join_team(invite_code="ABC123", user_id="")


@pytest.mark.asyncio
async def test_get_teams_for_user(test_db):
    """Test: список команд пользователя."""
    service = TeamService(test_db)
    team_a = await service.create_team(name="A", user_id="u1")
    await service.create_team(name="B", user_id="u2")
    await test_db.commit()

    teams = await service.get_teams_for_user("u1")

    assert [t.id for t in teams] == [team_a.id]
    assert await service.get_teams_for_user("nobody") == []


@pytest.mark.asyncio
async def test_get_team_details_not_found(test_db):
    """Test: детали несуществующей команды → NotFoundError."""
    with pytest.raises(NotFoundError, match="Team not found"):
        await TeamService(test_db).get_team_details("missing")


@pytest.mark.asyncio
async def test_leave_team_not_last_member(test_db):
    """Test: выход не последнего участника - команда остаётся."""
    service = TeamService(test_db)
    team = await service.create_team(name="Engineering", user_id="u1")
    await service.join_team(invite_code=team.invite_code, user_id="u2")
    await test_db.commit()

    result = await service.leave_team(team_id=team.id, user_id="u1")
    await test_db.commit()

    assert result.team_deleted is False
    _, members = await service.get_team_details(team.id)
    assert [m.user_id for m in members] == ["u2"]
    assert await count_rows(test_db, Tag, team_id=team.id) == 6


@pytest.mark.asyncio
async def test_leave_team_last_member_deletes_team(test_db):
    """Test: выход последнего участника удаляет команду, теги и привязки."""
    team_service = TeamService(test_db)
    team = await team_service.create_team(name="Engineering", user_id="u1")
    await test_db.commit()

    tags = await TagService(test_db).get_team_tags(team.id)
    await CardTagService(test_db).attach_tag(team.id, "card-42", tags[0].id)
    await test_db.commit()

    result = await team_service.leave_team(team_id=team.id, user_id="u1")
    await test_db.commit()

    assert result.team_deleted is True
    assert await count_rows(test_db, Team, id=team.id) == 0
    assert await count_rows(test_db, Member, team_id=team.id) == 0
    assert await count_rows(test_db, Tag, team_id=team.id) == 0
    assert await count_rows(test_db, CardTag, team_id=team.id) == 0


@pytest.mark.asyncio
async def test_leave_team_not_a_member(test_db):
    """Test: выход не участника → NotFoundError."""
    service = TeamService(test_db)
    team = await service.create_team(name="Engineering", user_id="u1")
    await test_db.commit()

    with pytest.raises(NotFoundError, match="Not a member"):
        await service.leave_team(team_id=team.id, user_id="stranger")

    with pytest.raises(ValidationError, match="userId required"):
        await service.leave_team(team_id=team.id, user_id="")


# ============================================================================
# TAG SERVICE TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_tag(test_db):
    """Test: создание тега добавляет его в конец списка."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    service = TagService(test_db)

    tag = await service.create_tag(team_id=team.id, name="  Needs QA ", color="🧪")
    await test_db.commit()

    assert tag.name == "Needs QA"
    assert tag.color == "🧪"
    tags = await service.get_team_tags(team.id)
    assert tags[-1].id == tag.id


@pytest.mark.asyncio
async def test_create_tag_duplicate_name(test_db):
    """Test: дубликат имени в команде отклоняется, в другой команде - нет."""
    team_service = TeamService(test_db)
    team_a = await team_service.create_team(name="A", user_id="u1")
    team_b = await team_service.create_team(name="B", user_id="u1")
    await test_db.commit()
    service = TagService(test_db)

    await service.create_tag(team_id=team_a.id, name="Needs QA", color="🧪")
    await test_db.commit()

    with pytest.raises(ConflictError, match="already exists"):
        await service.create_tag(team_id=team_a.id, name="Needs QA", color="🔥")

    tag = await service.create_tag(team_id=team_b.id, name="Needs QA", color="🧪")
    await test_db.commit()
    assert tag.team_id == team_b.id


@pytest.mark.asyncio
async def test_create_tag_validation(test_db):
    """Test: все поля обязательны."""
    service = TagService(test_db)

    with pytest.raises(ValidationError, match="teamId, name, and color required"):
        await service.create_tag(team_id="t1", name="Bug", color="")


@pytest.mark.asyncio
async def test_update_tag_partial(test_db):
    """Test: обновляются только переданные поля."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    service = TagService(test_db)
    tag = (await service.get_team_tags(team.id))[0]

    updated = await service.update_tag(tag.id, color="🚨")
    await test_db.commit()
    assert (updated.name, updated.color) == ("Urgent", "🚨")

    updated = await service.update_tag(tag.id, name="Critical")
    await test_db.commit()
    assert (updated.name, updated.color) == ("Critical", "🚨")

    updated = await service.update_tag(tag.id, name="   ", color=None)
    assert (updated.name, updated.color) == ("Critical", "🚨")


@pytest.mark.asyncio
async def test_update_missing_tag_returns_none(test_db):
    """Test: обновление несуществующего тега - не ошибка."""
    assert await TagService(test_db).update_tag("missing", name="X") is None


@pytest.mark.asyncio
async def test_update_tag_to_existing_name(test_db):
    """Test: переименование в занятое имя → ConflictError."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    service = TagService(test_db)
    tags = await service.get_team_tags(team.id)

    with pytest.raises(ConflictError):
        await service.update_tag(tags[0].id, name="Bug")


@pytest.mark.asyncio
async def test_delete_tag_removes_card_tags(test_db):
    """Test: удаление тега удаляет и его привязки; повторное удаление не ошибка."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    service = TagService(test_db)
    tag = (await service.get_team_tags(team.id))[0]
    await CardTagService(test_db).attach_tag(team.id, "card-1", tag.id)
    await test_db.commit()

    assert await service.delete_tag(tag.id) is True
    await test_db.commit()

    assert await count_rows(test_db, CardTag, tag_id=tag.id) == 0
    assert len(await service.get_team_tags(team.id)) == 5
    assert await service.delete_tag(tag.id) is False


# ============================================================================
# CARD TAG SERVICE TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_attach_tag_grouped_by_card(test_db):
    """Test: привязки группируются по карточкам."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    urgent, in_progress = (await TagService(test_db).get_team_tags(team.id))[:2]
    service = CardTagService(test_db)

    await service.attach_tag(team.id, "card-1", urgent.id)
    await service.attach_tag(team.id, "card-1", in_progress.id)
    await service.attach_tag(team.id, "card-2", urgent.id)
    await test_db.commit()

    grouped = await service.get_team_card_tags(team.id)

    assert set(grouped) == {"card-1", "card-2"}
    assert [t["name"] for t in grouped["card-1"]] == ["Urgent", "In Progress"]
    assert grouped["card-2"] == [{"id": urgent.id, "name": "Urgent", "color": "🔥"}]


@pytest.mark.asyncio
async def test_attach_tag_idempotent(test_db):
    """Test: двойная привязка даёт одну строку."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    tag = (await TagService(test_db).get_team_tags(team.id))[0]
    service = CardTagService(test_db)

    assert await service.attach_tag(team.id, "card-42", tag.id) is True
    assert await service.attach_tag(team.id, "card-42", tag.id) is False
    await test_db.commit()

    assert await count_rows(test_db, CardTag, card_id="card-42") == 1


@pytest.mark.asyncio
async def test_attach_tag_from_other_team_rejected(test_db):
    """Test: тег чужой команды привязать нельзя."""
    team_service = TeamService(test_db)
    team_a = await team_service.create_team(name="A", user_id="u1")
    team_b = await team_service.create_team(name="B", user_id="u2")
    await test_db.commit()
    foreign_tag = (await TagService(test_db).get_team_tags(team_b.id))[0]

    with pytest.raises(ValidationError, match="Invalid tag for this team"):
        await CardTagService(test_db).attach_tag(team_a.id, "card-42", foreign_tag.id)

    assert await count_rows(test_db, CardTag) == 0


@pytest.mark.asyncio
async def test_detach_tag(test_db):
    """Test: отвязка тега; повторная отвязка не ошибка."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    tag = (await TagService(test_db).get_team_tags(team.id))[0]
    service = CardTagService(test_db)
    await service.attach_tag(team.id, "projects/1/todos/2", tag.id)
    await test_db.commit()

    assert await service.detach_tag(team.id, "projects/1/todos/2", tag.id) is True
    assert await service.detach_tag(team.id, "projects/1/todos/2", tag.id) is False
    await test_db.commit()

    assert await service.get_team_card_tags(team.id) == {}


@pytest.mark.asyncio
async def test_detach_tag_validation(test_db):
    """Test: все поля обязательны."""
    with pytest.raises(ValidationError):
        await CardTagService(test_db).detach_tag("t1", "", "tag1")


# ============================================================================
# CONCURRENT REQUESTS
# ============================================================================
# Гонки воспроизводятся в одной сессии: "чужой" запрос успевает записать
# свою строку между проверкой сервиса и его INSERT/DELETE.


@pytest.mark.asyncio
async def test_create_team_invite_code_collision(test_db, monkeypatch):
    """Test: занятый инвайт-код → InternalError, вторая команда не создаётся."""
    monkeypatch.setattr("tagger.services.team.new_invite_code", lambda: "SAME00")
    service = TeamService(test_db)
    await service.create_team(name="First", user_id="u1")
    await test_db.commit()

    with pytest.raises(InternalError, match="Failed to create team"):
        await service.create_team(name="Second", user_id="u2")

    assert await count_rows(test_db, Team) == 1
    assert await count_rows(test_db, Member) == 1
    assert await count_rows(test_db, Tag) == 6


@pytest.mark.asyncio
async def test_create_tag_same_name_inserted_after_check(test_db, monkeypatch):
    """Test: дубликат, появившийся после проверки имени, ловится UNIQUE → ConflictError."""
    team = await TeamService(test_db).create_team(name="Engineering", user_id="u1")
    await test_db.commit()
    service = TagService(test_db)
    await service.create_tag(team_id=team.id, name="Needs QA", color="🧪")
    await test_db.commit()

    async def name_not_taken_yet(team_id, name):
        return None

    monkeypatch.setattr(service.tag_repo, "get_by_name", name_not_taken_yet)

    with pytest.raises(ConflictError, match="already exists"):
        await service.create_tag(team_id=team.id, name="Needs QA", color="🔥")

    assert await count_rows(test_db, Tag, team_id=team.id, name="Needs QA") == 1


@pytest.mark.asyncio
async def test_join_team_member_inserted_after_check(test_db, monkeypatch):
    """Test: параллельное вступление того же пользователя → already_member, одна строка."""
    service = TeamService(test_db)
    team = await service.create_team(name="Engineering", user_id="u1")
    await test_db.commit()

    # Другой запрос u2 успел вступить первым
    test_db.add(Member(team_id=team.id, user_id="u2", name="Member"))
    await test_db.commit()

    lookups = []
    get_member = service.member_repo.get_member

    async def stale_first_lookup(team_id, user_id):
        lookups.append(user_id)
        if len(lookups) == 1:
            return None
        return await get_member(team_id, user_id)

    monkeypatch.setattr(service.member_repo, "get_member", stale_first_lookup)

    result = await service.join_team(invite_code=team.invite_code, user_id="u2")

    assert result.already_member is True
    assert result.team.id == team.id
    assert await count_rows(test_db, Member, team_id=team.id, user_id="u2") == 1


@pytest.mark.asyncio
async def test_leave_team_locks_team_before_counting(test_db, monkeypatch):
    """Test: строка команды блокируется до подсчёта участников."""
    service = TeamService(test_db)
    team = await service.create_team(name="Engineering", user_id="u1")
    await service.join_team(invite_code=team.invite_code, user_id="u2")
    await test_db.commit()

    calls = []
    get_for_update = service.team_repo.get_for_update
    count_by_team = service.member_repo.count_by_team

    async def locking(team_id):
        calls.append("lock")
        return await get_for_update(team_id)

    async def counting(team_id):
        calls.append("count")
        return await count_by_team(team_id)

    monkeypatch.setattr(service.team_repo, "get_for_update", locking)
    monkeypatch.setattr(service.member_repo, "count_by_team", counting)

    await service.leave_team(team_id=team.id, user_id="u1")

    assert calls[0] == "lock"
    assert "count" in calls


@pytest.mark.asyncio
async def test_leave_team_other_member_left_meanwhile(test_db, monkeypatch):
    """Test: оба участника выходят одновременно - команда не остаётся пустой."""
    service = TeamService(test_db)
    team = await service.create_team(name="Engineering", user_id="u1")
    await service.join_team(invite_code=team.invite_code, user_id="u2")
    await test_db.commit()

    remove_member = service.member_repo.remove_member

    async def other_left_first(team_id, user_id):
        # u2 вышел уже после того, как мы насчитали двух участников
        await remove_member(team_id, "u2")
        return await remove_member(team_id, user_id)

    monkeypatch.setattr(service.member_repo, "remove_member", other_left_first)

    result = await service.leave_team(team_id=team.id, user_id="u1")
    await test_db.commit()

    assert result.team_deleted is True
    assert await count_rows(test_db, Team, id=team.id) == 0
    assert await count_rows(test_db, Member, team_id=team.id) == 0
    assert await count_rows(test_db, Tag, team_id=team.id) == 0
