import datetime

import pytest
from fastapi import HTTPException

from goalsync.models import invitation as invitation_model
from goalsync.schemas import team_schemas
from goalsync.services import team_service


class TestTeamService:

    def test_create_team_links_trainer(self, db, trainer):
        team = team_service.create_team(db, team_schemas.TeamCreate(name="Falcons"), trainer)

        assert team.id is not None
        assert team.trainer_id == trainer.id
        assert team.players == []
        assert team.allow_player_injury_reporting is True
        assert trainer.team_id == team.id
        assert trainer.role == "staff"
        assert trainer.position == "Head Coach"

    def test_create_team_rejects_players(self, db, make_user):
        player = make_user("Alex Morgan")
        with pytest.raises(HTTPException) as exc_info:
            team_service.create_team(db, team_schemas.TeamCreate(name="Falcons"), player)
        assert exc_info.value.status_code == 403

    def test_create_team_rejects_trainer_with_team(self, db, trainer, team):
        with pytest.raises(HTTPException) as exc_info:
            team_service.create_team(db, team_schemas.TeamCreate(name="Second"), trainer)
        assert exc_info.value.status_code == 400

    def test_other_trainer_cannot_rename_team(self, db, team, make_user):
        other = make_user("Other Coach", user_type="trainer")
        with pytest.raises(HTTPException) as exc_info:
            team_service.update_team_name(db, team.id, "Stolen", other)
        assert exc_info.value.status_code == 403

    def test_update_team_settings(self, db, trainer, team):
        updated = team_service.update_team_settings(
            db, team.id, team_schemas.TeamSettingsUpdate(allow_player_injury_reporting=False), trainer
        )
        assert updated.allow_player_injury_reporting is False

    def test_join_team_adds_player_once(self, db, team, make_user):
        player = make_user("Alex Morgan")
        joined = team_service.join_team(db, team.id, player)

        assert joined.players == [player.id]
        assert player.team_id == team.id
        assert player.role == "player"

        with pytest.raises(HTTPException) as exc_info:
            team_service.join_team(db, team.id, player)
        assert exc_info.value.status_code == 400

    def test_trainer_cannot_join_as_player(self, db, team, make_user):
        other = make_user("Other Coach", user_type="trainer")
        with pytest.raises(HTTPException) as exc_info:
            team_service.join_team(db, team.id, other)
        assert exc_info.value.status_code == 403

    def test_join_unknown_team(self, db, make_user):
        player = make_user("Alex Morgan")
        with pytest.raises(HTTPException) as exc_info:
            team_service.join_team(db, "missing-team", player)
        assert exc_info.value.status_code == 404

    def test_remove_player_clears_association(self, db, trainer, team, make_player):
        player = make_player("Alex Morgan", team=team, number="9", position="FWD")

        updated = team_service.remove_player(db, team.id, player.id, trainer)

        assert player.id not in updated.players
        db.refresh(player)
        assert player.team_id is None
        assert player.number is None
        assert player.position is None

    def test_remove_unknown_player(self, db, trainer, team):
        with pytest.raises(HTTPException) as exc_info:
            team_service.remove_player(db, team.id, "nobody", trainer)
        assert exc_info.value.status_code == 404

    def test_delete_team_detaches_members_and_invitations(self, db, trainer, team, make_player):
        player = make_player("Alex Morgan", team=team)
        db.add(invitation_model.Invitation(team_id=team.id, team_name=team.name, player_email="x@example.com", number="5"))
        db.commit()
        team_id = team.id

        assert team_service.delete_team(db, team_id, trainer) is True

        assert team_service.get_team(db, team_id) is None
        db.refresh(player)
        db.refresh(trainer)
        assert player.team_id is None
        assert trainer.team_id is None
        assert db.query(invitation_model.Invitation).filter(invitation_model.Invitation.team_id == team_id).count() == 0

    def test_get_team_members_orders_trainer_first(self, db, team, make_player):
        first = make_player("Alex Morgan", team=team, number="9", position="FWD")
        second = make_player("Sam Kerr", team=team)

        members = team_service.get_team_members(db, team.id)

        assert [m.role for m in members] == ["staff", "player", "player"]
        assert members[0].position == "Coach"
        assert [m.id for m in members[1:]] == [first.id, second.id]
        assert members[1].number == "9"
        assert members[2].position == "Unassigned"

    def test_fix_trainer_team_association(self, db, trainer, team):
        trainer.team_id = None
        db.commit()

        assert team_service.fix_trainer_team_association(db, trainer) == team.id
        assert trainer.team_id == team.id

    def test_injured_players_in_upcoming_matches(self, db, trainer, team, make_player, make_event):
        injured = make_player("Alex Morgan", team=team, position="FWD")
        healthy = make_player("Sam Kerr", team=team, position="MID")
        injured.status = "injured"
        db.commit()

        roster = [
            {"id": injured.id, "name": injured.name, "position": "FWD", "is_starter": True},
            {"id": healthy.id, "name": healthy.name, "position": "MID", "is_starter": True},
        ]
        future = datetime.datetime.utcnow() + datetime.timedelta(days=3)
        upcoming = make_event(team, title="Cup Final", start=future, roster=roster)
        make_event(team, title="Old Match", start=datetime.datetime(2020, 1, 1, 12, 0), roster=roster)

        warnings = team_service.get_injured_players_in_upcoming_matches(db, team.id, trainer)

        assert len(warnings) == 1
        assert warnings[0].id == injured.id
        assert warnings[0].match_id == upcoming.id

    def test_injury_warnings_are_trainer_only(self, db, team, make_player):
        player = make_player("Alex Morgan", team=team)
        with pytest.raises(HTTPException) as exc_info:
            team_service.get_injured_players_in_upcoming_matches(db, team.id, player)
        assert exc_info.value.status_code == 403
