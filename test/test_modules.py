"""
Test cases for module and quiz day administration.
"""
from alfitra import db
from alfitra.materials.models import ReferenceMaterial
from alfitra.modules.models import Module, QuizDay
from alfitra.quiz.models import Question, Submission


class TestRoleChecks:

    def test_admin_routes_require_token(self, client):
        response = client.get('/api/admin/modules')
        assert response.status_code == 401

    def test_participant_gets_forbidden(self, client, participant):
        response = client.post('/api/admin/modules', headers=participant['headers'], json={
            'name': 'Nope', 'section': 'Quran',
        })
        assert response.status_code == 403
        assert response.get_json()['success'] is False

    def test_unknown_route_is_json_404(self, client):
        response = client.get('/api/does-not-exist')
        assert response.status_code == 404
        assert response.get_json()['success'] is False


class TestModules:

    def test_create_and_list(self, client, admin, participant):
        response = client.post('/api/admin/modules', headers=admin['headers'], json={
            'name': ' Tajweed ', 'description': 'Rules', 'section': 'Quran',
        })
        assert response.status_code == 201
        module = response.get_json()['module']
        assert module['name'] == 'Tajweed'
        assert module['section'] == 'Quran'
        assert module['created_by'] == admin['id']

        listed = client.get('/api/modules', headers=participant['headers']).get_json()['modules']
        assert [m['id'] for m in listed] == [module['id']]

        admin_listed = client.get('/api/admin/modules', headers=admin['headers']).get_json()['modules']
        assert admin_listed[0]['creator_name'] == 'Admin'

    def test_newest_first(self, client, admin, participant):
        for name in ('First', 'Second', 'Third'):
            client.post('/api/admin/modules', headers=admin['headers'], json={'name': name, 'section': 'Seerat'})
        listed = client.get('/api/modules', headers=participant['headers']).get_json()['modules']
        assert [m['name'] for m in listed] == ['Third', 'Second', 'First']

    def test_invalid_section(self, client, admin):
        response = client.post('/api/admin/modules', headers=admin['headers'], json={
            'name': 'Fiqh', 'section': 'Fiqh',
        })
        assert response.status_code == 400

    def test_missing_name(self, client, admin):
        response = client.post('/api/admin/modules', headers=admin['headers'], json={'section': 'Quran'})
        assert response.status_code == 400

    def test_update_keeps_section(self, client, admin, seerat_day):
        response = client.put(f"/api/admin/modules/{seerat_day['module_id']}", headers=admin['headers'], json={
            'name': 'Seerat Advanced', 'section': 'Quran',
        })
        assert response.status_code == 200
        module = response.get_json()['module']
        assert module['name'] == 'Seerat Advanced'
        assert module['section'] == 'Seerat'

    def test_get_with_quiz_days(self, client, admin, seerat_day):
        response = client.get(f"/api/admin/modules/{seerat_day['module_id']}", headers=admin['headers'])
        assert response.status_code == 200
        data = response.get_json()
        assert [d['id'] for d in data['quiz_days']] == [seerat_day['quiz_day_id']]

    def test_missing_module_404(self, client, admin):
        assert client.get('/api/admin/modules/999', headers=admin['headers']).status_code == 404
        assert client.put('/api/admin/modules/999', headers=admin['headers'], json={'name': 'x'}).status_code == 404
        assert client.delete('/api/admin/modules/999', headers=admin['headers']).status_code == 404

    def test_delete_cascades(self, app, client, admin, participant, seerat_day, cloudinary_destroy):
        with app.app_context():
            db.session.add(ReferenceMaterial(
                module_id=seerat_day['module_id'], title='notes.pdf', url='https://example.com/notes.pdf',
                storage_public_id='quiz-references/notes_1', uploaded_by=admin['id'],
            ))
            db.session.commit()

        client.post('/api/quiz/submit', headers=participant['headers'], json={
            'quiz_day_id': seerat_day['quiz_day_id'], 'answers': [],
        })

        response = client.delete(f"/api/admin/modules/{seerat_day['module_id']}", headers=admin['headers'])
        assert response.status_code == 200

        with app.app_context():
            assert db.session.get(Module, seerat_day['module_id']) is None
            assert QuizDay.query.count() == 0
            assert Question.query.count() == 0
            assert Submission.query.count() == 0
            assert ReferenceMaterial.query.count() == 0
        cloudinary_destroy.assert_called_once_with('quiz-references/notes_1', resource_type='raw')


class TestQuizDays:

    def _create_module(self, client, admin, section='Quran'):
        return client.post('/api/admin/modules', headers=admin['headers'], json={
            'name': 'Hifz', 'section': section,
        }).get_json()['module']

    def test_create_defaults(self, client, admin):
        module = self._create_module(client, admin)
        response = client.post('/api/admin/quiz-days', headers=admin['headers'], json={
            'module_id': module['id'], 'date_label': 'Day 1',
        })
        assert response.status_code == 201
        day = response.get_json()['quiz_day']
        assert day['is_active'] is True
        assert day['is_published'] is False
        assert day['responses_open'] is True
        assert day['results_published'] is False

    def test_module_required(self, client, admin):
        response = client.post('/api/admin/quiz-days', headers=admin['headers'], json={'date_label': 'Day 1'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Module ID is required'

    def test_unknown_module(self, client, admin):
        response = client.post('/api/admin/quiz-days', headers=admin['headers'], json={
            'module_id': 999, 'date_label': 'Day 1',
        })
        assert response.status_code == 404

    def test_update_only_label_and_active(self, client, admin, seerat_day):
        other = self._create_module(client, admin)
        response = client.post('/api/admin/quiz-days', headers=admin['headers'], json={
            'id': seerat_day['quiz_day_id'],
            'module_id': other['id'],
            'date_label': 'Day One',
            'is_active': False,
        })
        assert response.status_code == 200
        day = response.get_json()['quiz_day']
        assert day['date_label'] == 'Day One'
        assert day['is_active'] is False
        assert day['module_id'] == seerat_day['module_id']
        assert day['is_published'] is True

    def test_toggles(self, client, admin, seerat_day):
        day_id = seerat_day['quiz_day_id']
        for path, key in (('publish', 'is_published'),
                          ('responses', 'responses_open'),
                          ('publish-results', 'results_published')):
            response = client.put(f'/api/admin/quiz-days/{day_id}/{path}', headers=admin['headers'],
                                  json={key: False})
            assert response.status_code == 200
            assert response.get_json()['quiz_day'][key] is False

            response = client.put(f'/api/admin/quiz-days/{day_id}/{path}', headers=admin['headers'],
                                  json={key: True})
            assert response.get_json()['quiz_day'][key] is True

    def test_toggle_requires_boolean(self, client, admin, seerat_day):
        response = client.put(f"/api/admin/quiz-days/{seerat_day['quiz_day_id']}/publish",
                              headers=admin['headers'], json={'is_published': 'yes'})
        assert response.status_code == 400

    def test_toggle_unknown_day(self, client, admin):
        response = client.put('/api/admin/quiz-days/999/publish', headers=admin['headers'],
                              json={'is_published': True})
        assert response.status_code == 404

    def test_participant_listing_only_published(self, client, admin, participant, seerat_day, set_day_flags):
        client.post('/api/admin/quiz-days', headers=admin['headers'], json={
            'module_id': seerat_day['module_id'], 'date_label': 'Draft',
        })
        set_day_flags(seerat_day['quiz_day_id'], responses_open=False)

        days = client.get('/api/quiz-days/all', headers=participant['headers']).get_json()['quiz_days']
        assert [d['date_label'] for d in days] == ['Day 1']
        assert days[0]['accepting_responses'] is False
        assert days[0]['module']['section'] == 'Seerat'

        by_module = client.get(f"/api/quiz-days/module/{seerat_day['module_id']}",
                               headers=participant['headers']).get_json()['quiz_days']
        assert [d['id'] for d in by_module] == [seerat_day['quiz_day_id']]

        all_days = client.get('/api/admin/quiz-days', headers=admin['headers']).get_json()['quiz_days']
        assert len(all_days) == 2
