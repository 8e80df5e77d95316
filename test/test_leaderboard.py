"""
Test cases for module evaluation, leaderboards and participant views.
"""
from types import SimpleNamespace

import pytest

from alfitra import db
from alfitra.admin.leaderboard import (
    aggregate_leaderboard,
    evaluate_module,
    parse_section,
    quiz_day_leaderboard,
)
from alfitra.common.errors import ValidationError
from alfitra.modules.models import Module, QuizDay
from alfitra.quiz.models import Submission


def row(sid, user_id, quiz_day_id, quran=0, seerat=0, answered=2, time=0):
    return SimpleNamespace(
        id=sid, user_id=user_id, quiz_day_id=quiz_day_id,
        section_scores={'Quran': quran, 'Seerat': seerat}, total_score=quran + seerat,
        answered_count=answered, time_taken_seconds=time,
    )


USERS = {
    1: SimpleNamespace(name='Aisha', email='aisha@example.com'),
    2: SimpleNamespace(name='Bilal', email='bilal@example.com'),
    3: SimpleNamespace(name='Hamza', email='hamza@example.com'),
}


class TestEvaluateModule:

    def test_groups_and_percent_per_question(self):
        results = evaluate_module([
            row(1, 1, 10, quran=1, answered=2),
            row(2, 1, 11, quran=2, answered=4),
            row(3, 2, 10, quran=3, answered=3),
        ], USERS)

        assert [r['user_id'] for r in results] == [1, 2]
        aisha = results[0]
        assert aisha['total_score'] == 3
        assert aisha['total_questions'] == 6
        assert aisha['quiz_days_completed'] == 2
        assert aisha['average_percent_per_question'] == 50.0
        assert aisha['rank'] == 1
        assert results[1]['average_percent_per_question'] == 100.0

    def test_rounds_to_two_places(self):
        results = evaluate_module([row(1, 1, 10, quran=1, answered=3)], USERS)
        assert results[0]['average_percent_per_question'] == 33.33

    def test_no_questions_is_zero(self):
        results = evaluate_module([row(1, 1, 10, answered=0)], USERS)
        assert results[0]['average_percent_per_question'] == 0

    def test_ties_keep_first_seen_order(self):
        results = evaluate_module([row(1, 2, 10, quran=1), row(2, 1, 10, quran=1)], USERS)
        assert [r['user_id'] for r in results] == [2, 1]
        assert [r['rank'] for r in results] == [1, 2]


class TestAggregateLeaderboard:

    SUBMISSIONS = [
        row(1, 1, 10, quran=5, seerat=0),
        row(2, 2, 10, quran=1, seerat=3),
        row(3, 2, 11, quran=1, seerat=2),
        row(4, 3, 11, quran=2, seerat=1),
    ]

    def test_sorted_by_total(self):
        results = aggregate_leaderboard(self.SUBMISSIONS, USERS)
        assert [r['user_id'] for r in results] == [2, 1, 3]
        bilal = results[0]
        assert bilal['total_score'] == 7
        assert bilal['quizzes_taken'] == 2
        assert bilal['average_score_per_quiz'] == 3.5
        assert bilal['section_scores'] == {'Quran': 2, 'Seerat': 5}
        assert [r['rank'] for r in results] == [1, 2, 3]

    def test_section_filter_resorts(self):
        results = aggregate_leaderboard(self.SUBMISSIONS, USERS, 'Quran')
        assert [r['user_id'] for r in results] == [1, 2, 3]
        assert [r['total_score'] for r in results] == [5, 2, 2]
        assert results[1]['combined_score'] == 7

        results = aggregate_leaderboard(self.SUBMISSIONS, USERS, 'Seerat')
        assert [r['user_id'] for r in results] == [2, 3, 1]

    def test_all_uses_combined_total(self):
        assert aggregate_leaderboard(self.SUBMISSIONS, USERS, 'All') == \
            aggregate_leaderboard(self.SUBMISSIONS, USERS)

    def test_sorted_descending_for_any_input(self):
        results = aggregate_leaderboard(self.SUBMISSIONS[::-1], USERS)
        scores = [r['total_score'] for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_unknown_user(self):
        results = aggregate_leaderboard([row(1, 42, 10, quran=1)], USERS)
        assert results[0]['name'] == 'Unknown'

    @pytest.mark.parametrize('value,expected', [(None, 'All'), ('', 'All'), ('Quran', 'Quran')])
    def test_parse_section(self, value, expected):
        assert parse_section(value) == expected

    def test_parse_section_rejects_unknown(self):
        with pytest.raises(ValidationError):
            parse_section('quran')


class TestQuizDayLeaderboard:

    def test_score_then_time(self):
        results = quiz_day_leaderboard([
            row(1, 1, 10, quran=2, time=90),
            row(2, 2, 10, quran=2, time=60),
            row(3, 3, 10, quran=3, time=300),
        ], USERS)
        assert [r['user_id'] for r in results] == [3, 2, 1]
        assert results[1]['total_time'] == 60
        assert results[1]['submission_count'] == 1

    def test_limit(self):
        rows = [row(i, i, 10, quran=i % 7) for i in range(150)]
        assert len(quiz_day_leaderboard(rows, {})) == 100


class TestLeaderboardRoutes:

    @pytest.fixture
    def scored(self, app, make_user, seerat_day):
        """Two participants with stored submissions on the Seerat day and a Quran day."""
        first = make_user(name='Aisha')
        second = make_user(name='Bilal')
        with app.app_context():
            quran = Module(name='Hifz', description='', section='Quran')
            db.session.add(quran)
            db.session.flush()
            quran_day = QuizDay(module_id=quran.id, date_label='Q1', is_published=True)
            db.session.add(quran_day)
            db.session.flush()
            db.session.add_all([
                Submission(user_id=first['id'], quiz_day_id=seerat_day['quiz_day_id'],
                           section_scores={'Quran': 0, 'Seerat': 1}, total_score=1, time_taken_seconds=50),
                Submission(user_id=second['id'], quiz_day_id=seerat_day['quiz_day_id'],
                           section_scores={'Quran': 0, 'Seerat': 2}, total_score=2, time_taken_seconds=80),
                Submission(user_id=first['id'], quiz_day_id=quran_day.id,
                           section_scores={'Quran': 3, 'Seerat': 0}, total_score=3, time_taken_seconds=10),
            ])
            db.session.commit()
            return {'first': first, 'second': second, 'quran_module_id': quran.id,
                    'quran_day_id': quran_day.id}

    def test_overall(self, client, admin, scored):
        data = client.get('/api/admin/leaderboard/all', headers=admin['headers']).get_json()
        assert data['section'] == 'All'
        assert [r['name'] for r in data['leaderboard']] == ['Aisha', 'Bilal']
        assert data['leaderboard'][0]['total_score'] == 4

    def test_overall_by_section(self, client, admin, scored):
        data = client.get('/api/admin/leaderboard/all?section=Seerat', headers=admin['headers']).get_json()
        assert [r['name'] for r in data['leaderboard']] == ['Bilal', 'Aisha']

    def test_invalid_section(self, client, admin, scored):
        response = client.get('/api/admin/leaderboard/all?section=Fiqh', headers=admin['headers'])
        assert response.status_code == 400

    def test_module_leaderboard(self, client, admin, scored, seerat_day):
        data = client.get(f"/api/admin/leaderboard/{seerat_day['module_id']}",
                          headers=admin['headers']).get_json()
        assert [r['name'] for r in data['leaderboard']] == ['Bilal', 'Aisha']
        assert client.get('/api/admin/leaderboard/999', headers=admin['headers']).status_code == 404

    def test_score_leaderboard(self, client, admin, scored, seerat_day):
        data = client.get('/api/admin/leaderboard', headers=admin['headers']).get_json()
        assert data['leaderboard'][0]['name'] == 'Aisha'
        assert data['leaderboard'][0]['total_time'] == 60
        assert data['leaderboard'][0]['submission_count'] == 2

        data = client.get(f"/api/admin/leaderboard?quiz_day_id={seerat_day['quiz_day_id']}",
                          headers=admin['headers']).get_json()
        assert [r['name'] for r in data['leaderboard']] == ['Bilal', 'Aisha']

    def test_evaluation(self, client, admin, scored, seerat_day):
        response = client.get(f"/api/admin/modules/{seerat_day['module_id']}/evaluation",
                              headers=admin['headers'])
        assert response.status_code == 200
        data = response.get_json()
        assert data['total_participants'] == 2
        assert data['module']['name'] == 'Seerat Basics'
        assert [d['date_label'] for d in data['quiz_days']] == ['Day 1']
        assert data['results'][0]['name'] == 'Bilal'
        assert data['results'][0]['total_questions'] == 0
        assert data['results'][0]['average_percent_per_question'] == 0

    def test_participants(self, client, admin, scored, seerat_day):
        data = client.get(f"/api/admin/participants/{seerat_day['quiz_day_id']}",
                          headers=admin['headers']).get_json()
        assert [p['user']['name'] for p in data['participants']] == ['Bilal', 'Aisha']
        assert data['participants'][0]['total_score'] == 2

    def test_participant_profile_shows_scores_to_admin(self, client, admin, scored):
        response = client.get(f"/api/admin/participant-profile/{scored['first']['id']}",
                              headers=admin['headers'])
        assert response.status_code == 200
        data = response.get_json()
        assert data['user']['name'] == 'Aisha'
        assert 'password_hash' not in data['user']
        assert len(data['submissions']) == 2
        assert all('total_score' in s for s in data['submissions'])
        assert all(s['quiz_day']['results_published'] is False for s in data['submissions'])

    def test_participant_profile_missing(self, client, admin):
        assert client.get('/api/admin/participant-profile/999', headers=admin['headers']).status_code == 404

    def test_participant_forbidden(self, client, participant):
        assert client.get('/api/admin/leaderboard/all', headers=participant['headers']).status_code == 403
