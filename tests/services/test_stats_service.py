import datetime

import pytest
from fastapi import HTTPException

from goalsync.models import notification as notification_model
from goalsync.schemas import stats_schemas
from goalsync.services import stats_service


def _stats(**values):
    return stats_schemas.StatsRecord(**values)


def _notifications(db, notification_type, user_id=None):
    query = db.query(notification_model.Notification).filter(notification_model.Notification.type == notification_type)
    if user_id:
        query = query.filter(notification_model.Notification.user_id == user_id)
    return query.all()


@pytest.fixture
def players(team, make_player):
    return [
        make_player("Alex Morgan", team=team, number="9", position="FWD"),
        make_player("Sam Kerr", team=team, number="20", position="MID"),
    ]


@pytest.fixture
def match(team, players, make_event):
    return make_event(team, attendees=[p.id for p in players], status="completed")


def _submit(db, match, player, **values):
    return stats_service.submit_player_stats(
        db, match.id, stats_schemas.PlayerStatsSubmit(stats=_stats(**values)), player
    )


def _review(db, record, trainer, approved=True, comments=None):
    return stats_service.review_player_stats(
        db, record.id, stats_schemas.PlayerStatsReview(approved=approved, comments=comments), trainer
    )


def _score(db, match, trainer, status="draft"):
    return stats_service.submit_match_score(
        db, match.id, stats_schemas.MatchScoreSubmit(home_score=2, away_score=1, possession=55, status=status), trainer
    )


class TestPlayerStatsSubmission:

    def test_player_submission_waits_for_review(self, db, trainer, match, players):
        record = _submit(db, match, players[0], goals=2)

        assert record.status == "pending"
        assert record.player_id == players[0].id
        assert record.stats["goals"] == 2
        approval = _notifications(db, "approval_needed", trainer.id)
        assert len(approval) == 1
        assert approval[0].related_id == record.id

    def test_absent_player_cannot_submit(self, db, team, match, make_player):
        benched = make_player("Jo Lee", team=team)
        with pytest.raises(HTTPException) as exc_info:
            _submit(db, match, benched)
        assert exc_info.value.status_code == 403

    def test_one_record_per_player(self, db, match, players):
        _submit(db, match, players[0])
        with pytest.raises(HTTPException) as exc_info:
            _submit(db, match, players[0])
        assert exc_info.value.status_code == 400

    def test_trainer_submission_is_approved(self, db, trainer, match, players):
        record = stats_service.submit_player_stats(
            db, match.id, stats_schemas.PlayerStatsSubmit(stats=_stats(assists=1), player_id=players[1].id), trainer
        )
        assert record.status == "approved"
        assert record.reviewed_by == trainer.id
        assert _notifications(db, "approval_needed") == []

    def test_trainer_submission_requires_attendee(self, db, trainer, team, match, make_player):
        benched = make_player("Jo Lee", team=team)
        with pytest.raises(HTTPException) as exc_info:
            stats_service.submit_player_stats(
                db, match.id, stats_schemas.PlayerStatsSubmit(stats=_stats(), player_id=benched.id), trainer
            )
        assert exc_info.value.status_code == 400

    def test_card_limits(self):
        with pytest.raises(ValueError):
            _stats(yellow_cards=3)
        with pytest.raises(ValueError):
            _stats(minutes_played=200)


class TestPlayerStatsReview:

    def test_review_notifies_player(self, db, trainer, match, players):
        record = _submit(db, match, players[0])

        reviewed = _review(db, record, trainer, approved=False, comments="Check your minutes")

        assert reviewed.status == "rejected"
        assert reviewed.comments == "Check your minutes"
        rejected = _notifications(db, "stats_rejected", players[0].id)
        assert len(rejected) == 1
        assert "Check your minutes" in rejected[0].message

    def test_only_team_trainer_reviews(self, db, match, players, make_user):
        record = _submit(db, match, players[0])
        other = make_user("Other Coach", user_type="trainer")
        with pytest.raises(HTTPException) as exc_info:
            _review(db, record, other)
        assert exc_info.value.status_code == 403

    def test_edit_after_rejection_resets_to_pending(self, db, trainer, match, players):
        record = _submit(db, match, players[0], goals=5)
        _review(db, record, trainer, approved=False)

        updated = stats_service.update_player_stats(
            db, record.id, stats_schemas.PlayerStatsUpdate(stats=_stats(goals=1)), players[0]
        )
        assert updated.status == "pending"
        assert updated.stats["goals"] == 1

    def test_player_cannot_edit_approved_stats(self, db, trainer, match, players):
        record = _submit(db, match, players[0])
        _review(db, record, trainer)
        with pytest.raises(HTTPException) as exc_info:
            stats_service.update_player_stats(
                db, record.id, stats_schemas.PlayerStatsUpdate(stats=_stats(goals=3)), players[0]
            )
        assert exc_info.value.status_code == 400

    def test_trainer_edit_keeps_status(self, db, trainer, match, players):
        record = _submit(db, match, players[0])
        _review(db, record, trainer)
        updated = stats_service.update_player_stats(
            db, record.id, stats_schemas.PlayerStatsUpdate(stats=_stats(goals=3)), trainer
        )
        assert updated.status == "approved"
        assert updated.stats["goals"] == 3

    def test_teammate_cannot_edit(self, db, match, players):
        record = _submit(db, match, players[0])
        with pytest.raises(HTTPException) as exc_info:
            stats_service.update_player_stats(db, record.id, stats_schemas.PlayerStatsUpdate(stats=_stats()), players[1])
        assert exc_info.value.status_code == 403


class TestMatchStatsRelease:

    def test_release_after_all_attendees_approved(self, db, trainer, match, players):
        match_stats = _score(db, match, trainer)
        assert match_stats.visibility == "private"
        assert match.score_submitted is True

        first = _submit(db, match, players[0])
        second = _submit(db, match, players[1])
        _review(db, first, trainer)

        db.refresh(match_stats)
        assert match_stats.visibility == "private"
        assert match_stats.is_complete is False

        _review(db, second, trainer)

        db.refresh(match_stats)
        assert match_stats.visibility == "public"
        assert match_stats.is_complete is True
        assert match_stats.released_at is not None
        released = _notifications(db, "stats_released")
        assert {n.user_id for n in released} == {trainer.id, players[0].id, players[1].id}

    def test_rejected_record_blocks_release(self, db, trainer, match, players):
        _score(db, match, trainer)
        _review(db, _submit(db, match, players[0]), trainer)
        _review(db, _submit(db, match, players[1]), trainer, approved=False)

        match_stats = stats_service.get_match_stats_record(db, match.id)
        assert match_stats.visibility == "private"
        assert match_stats.is_complete is False
        assert _notifications(db, "stats_released") == []

    def test_release_is_not_repeated(self, db, trainer, match, players):
        _score(db, match, trainer)
        for player in players:
            _review(db, _submit(db, match, player), trainer)
        notified = len(_notifications(db, "stats_released"))

        assert stats_service.check_and_release_match_stats(db, match.id) is False
        assert len(_notifications(db, "stats_released")) == notified

    def test_no_release_without_match_stats(self, db, trainer, match, players):
        for player in players:
            _review(db, _submit(db, match, player), trainer)

        assert stats_service.check_and_release_match_stats(db, match.id) is False
        assert stats_service.get_match_stats_record(db, match.id) is None

    def test_no_release_without_attendees(self, db, trainer, team, make_event):
        empty_match = make_event(team, title="Friendly")
        _score(db, empty_match, trainer)

        assert stats_service.check_and_release_match_stats(db, empty_match.id) is False

    def test_score_submission_releases_complete_match(self, db, trainer, match, players):
        for player in players:
            stats_service.submit_player_stats(
                db, match.id, stats_schemas.PlayerStatsSubmit(stats=_stats(), player_id=player.id), trainer
            )

        match_stats = _score(db, match, trainer, status="final")

        assert match_stats.visibility == "public"
        assert match_stats.released_by == stats_service.SYSTEM_RELEASE

    def test_manual_visibility(self, db, trainer, match, players):
        _score(db, match, trainer)

        public = stats_service.set_match_stats_visibility(db, match.id, "public", trainer)
        assert public.visibility == "public"
        assert public.released_by == trainer.id
        assert len(_notifications(db, "stats_released")) == 3

        private = stats_service.set_match_stats_visibility(db, match.id, "private", trainer)
        assert private.visibility == "private"

        with pytest.raises(HTTPException) as exc_info:
            stats_service.set_match_stats_visibility(db, match.id, "public", players[0])
        assert exc_info.value.status_code == 403

    def test_players_see_match_stats_once_public(self, db, trainer, match, players):
        _score(db, match, trainer)

        assert stats_service.get_match_stats(db, match.id, trainer).home_score == 2
        with pytest.raises(HTTPException) as exc_info:
            stats_service.get_match_stats(db, match.id, players[0])
        assert exc_info.value.status_code == 403

        stats_service.set_match_stats_visibility(db, match.id, "public", trainer)
        assert stats_service.get_match_stats(db, match.id, players[0]).visibility == "public"


class TestStatsReading:

    def test_player_sees_own_and_released_records(self, db, trainer, match, players):
        _score(db, match, trainer)
        own = _submit(db, match, players[0])
        teammate = _submit(db, match, players[1])
        _review(db, teammate, trainer)

        assert [r.id for r in stats_service.get_match_player_stats(db, match.id, players[0])] == [own.id]
        assert len(stats_service.get_match_player_stats(db, match.id, trainer)) == 2

        stats_service.set_match_stats_visibility(db, match.id, "public", trainer)
        visible = {r.id for r in stats_service.get_match_player_stats(db, match.id, players[0])}
        assert visible == {own.id, teammate.id}

    def test_match_summary_counts_approved_only(self, db, trainer, match, players):
        _review(db, _submit(db, match, players[0], goals=2, shots_on_target=3, minutes_played=90), trainer)
        _submit(db, match, players[1], goals=4, minutes_played=60)

        summary = stats_service.get_match_stats_summary(db, match.id, trainer)

        assert summary.players == 1
        assert summary.total_goals == 2
        assert summary.total_shots_on_target == 3
        assert summary.avg_minutes_played == 90

    def test_average_minutes_rounds_halves_up(self, db, trainer, match, players):
        _review(db, _submit(db, match, players[0], minutes_played=90), trainer)
        _review(db, _submit(db, match, players[1], minutes_played=45), trainer)

        summary = stats_service.get_match_stats_summary(db, match.id, trainer)

        assert summary.avg_minutes_played == 68

    def test_pending_player_stats(self, db, trainer, team, match, players):
        record = _submit(db, match, players[0])
        _review(db, _submit(db, match, players[1]), trainer)

        pending = stats_service.get_pending_player_stats(db, team.id, trainer)

        assert [p.id for p in pending] == [record.id]
        assert pending[0].match_title == "League Game"
        assert pending[0].player_name == "Alex Morgan"

    def test_pending_match_stats(self, db, trainer, team, match, make_event):
        future = datetime.datetime.utcnow() + datetime.timedelta(days=2)
        make_event(team, title="Next Week", start=future)
        ended = make_event(team, title="Last Week", start=datetime.datetime(2026, 1, 10, 15, 0))

        pending = {m.id for m in stats_service.get_pending_match_stats(db, team.id, trainer)}
        assert pending == {match.id, ended.id}

        _score(db, match, trainer, status="final")
        pending = {m.id for m in stats_service.get_pending_match_stats(db, team.id, trainer)}
        assert pending == {ended.id}

    def test_player_stats_overview(self, db, trainer, team, match, players, make_event):
        rejected = _submit(db, match, players[0])
        _review(db, rejected, trainer, approved=False)
        roster = [{"id": players[0].id, "name": players[0].name, "position": "FWD", "is_starter": True}]
        missing = make_event(team, title="Cup Tie", status="completed", roster=roster, opponent="United")

        overview = stats_service.get_player_stats_overview(db, players[0].id, players[0])

        assert [r.id for r in overview.rejected] == [rejected.id]
        assert overview.rejected[0].opponent == "Rovers"
        assert overview.pending_approval == []
        assert [m.id for m in overview.needs_submission] == [missing.id]
        assert overview.needs_submission[0].opponent == "United"

    def test_teammate_cannot_view_overview(self, db, match, players):
        with pytest.raises(HTTPException) as exc_info:
            stats_service.get_player_stats_overview(db, players[0].id, players[1])
        assert exc_info.value.status_code == 403

    def test_season_totals(self, db, trainer, team, match, players, make_event):
        _review(db, _submit(db, match, players[0], goals=2, yellow_cards=1, minutes_played=80), trainer)
        second = make_event(team, title="Return Leg", attendees=[players[0].id])
        _review(db, _submit(db, second, players[0], goals=1, saves=3, clean_sheet=True), trainer)
        third = make_event(team, title="Derby", attendees=[players[0].id])
        _submit(db, third, players[0], goals=7)

        totals = stats_service.get_player_season_totals(db, players[0].id, trainer)

        assert totals.matches == 2
        assert totals.goals == 3
        assert totals.yellow_cards == 1
        assert totals.minutes_played == 170
        assert totals.saves == 3
        assert totals.clean_sheets == 1


class TestMatchScoreReminders:

    def test_reminders_created_once(self, db, trainer, team, match):
        assert stats_service.check_and_create_match_score_notifications(db, team.id, trainer) == 1
        assert stats_service.check_and_create_match_score_notifications(db, team.id, trainer) == 0

        needed = _notifications(db, "stats_needed", trainer.id)
        assert [n.related_id for n in needed] == [match.id]

    def test_reminders_skip_submitted_scores(self, db, trainer, team, match):
        _score(db, match, trainer)
        assert stats_service.check_and_create_match_score_notifications(db, team.id, trainer) == 0

    def test_reminders_only_for_trainer(self, db, team, match, players):
        assert stats_service.check_and_create_match_score_notifications(db, team.id, players[0]) == 0
        assert _notifications(db, "stats_needed") == []

    def test_final_score_clears_reminders(self, db, trainer, team, match):
        stats_service.check_and_create_match_score_notifications(db, team.id, trainer)

        _score(db, match, trainer, status="draft")
        assert len(_notifications(db, "stats_needed")) == 1

        _score(db, match, trainer, status="final")
        assert _notifications(db, "stats_needed") == []

    def test_skip_score_requirement(self, db, trainer, team, match):
        stats_service.check_and_create_match_score_notifications(db, team.id, trainer)

        match_stats = stats_service.delete_match_score_requirement(db, team.id, match.id, trainer)

        assert match_stats.status == "final"
        assert match_stats.skip_reason == "technical_issue"
        db.refresh(match)
        assert match.score_submitted is True
        assert _notifications(db, "stats_needed") == []
        assert stats_service.check_and_create_match_score_notifications(db, team.id, trainer) == 0
