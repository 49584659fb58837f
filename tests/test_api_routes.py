"""
Tests for the HTTP action endpoints and their response envelope
"""
import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError


@pytest.fixture
def catalog(client, api_headers, sample_groups):
    """A project with one tag-configured category, created through the admin API"""
    response = client.post(
        '/api/admin/projects', json={'name': 'Star Quest', 'itemType': 'game'}, headers=api_headers['admin']
    )
    project = response.get_json()['data']
    response = client.post(
        f"/api/admin/projects/{project['id']}/categories",
        json={'name': 'Mods', 'description': 'Community mods', 'tagGroupConfigs': sample_groups},
        headers=api_headers['admin'],
    )
    category = response.get_json()['data']['category']
    return {'project': project, 'category': category}


def _create_resource(client, headers, catalog, **overrides):
    payload = {
        'projectId': catalog['project']['id'],
        'categoryId': catalog['category']['id'],
        'name': 'Better Sky',
        'selectedDynamicTags': {'grp_type': ['tag_rpg']},
        'files': [],
    }
    payload.update(overrides)
    return client.post('/api/resources', json=payload, headers=headers)


class TestEnvelope:
    """Tests for error envelopes and authorization at the HTTP boundary"""

    def test_anonymous_admin_action(self, client):
        response = client.post('/api/admin/projects', json={'name': 'X', 'itemType': 'game'})
        data = response.get_json()

        assert response.status_code == 401
        assert data == {'success': False, 'error': 'Authentication required', 'errorCode': 'AUTH_REQUIRED'}

    def test_regular_user_forbidden(self, client, api_headers):
        response = client.post('/api/admin/projects', json={'name': 'X', 'itemType': 'game'}, headers=api_headers['user'])

        assert response.status_code == 403
        assert response.get_json()['errorCode'] == 'FORBIDDEN'

    def test_unknown_token_is_anonymous(self, client):
        response = client.post(
            '/api/admin/projects', json={'name': 'X', 'itemType': 'game'}, headers={'Authorization': 'Bearer nope'}
        )
        assert response.status_code == 401

    def test_unknown_route(self, client):
        response = client.get('/api/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['errorCode'] == 'NOT_FOUND'

    def test_database_errors_are_not_leaked(self, client):
        with patch(
            'services.project_service.ProjectService.list_published',
            side_effect=OperationalError('SELECT secret', {}, Exception('disk I/O error')),
        ):
            response = client.get('/api/projects?itemType=game')
        data = response.get_json()

        assert response.status_code == 500
        assert data['errorCode'] == 'DB_ERROR'
        assert 'secret' not in data['error']


class TestAdminAndCatalog:
    """Tests for project/category administration and public browsing"""

    def test_category_round_trip(self, client, catalog):
        category = catalog['category']

        assert category['description'] == 'Community mods'
        assert [group['groupDisplayName'] for group in category['tagGroupConfigs']] == ['Type', 'Platform']
        assert ':::CONFIG_JSON:::' in category['rawDescription']

    def test_invalid_tag_groups_rejected(self, client, api_headers, catalog, sample_groups):
        sample_groups[0]['groupDisplayName'] = ''
        response = client.put(
            f"/api/admin/categories/{catalog['category']['id']}/tag-groups",
            json={'tagGroupConfigs': sample_groups},
            headers=api_headers['mod'],
        )

        assert response.status_code == 400
        assert response.get_json()['errorCode'] == 'VALIDATION_ERROR'

    def test_tag_groups_body_without_list_rejected(self, client, api_headers, catalog):
        url = f"/api/admin/categories/{catalog['category']['id']}/tag-groups"
        response = client.put(url, json={}, headers=api_headers['admin'])

        assert response.status_code == 400
        assert response.get_json()['errorCode'] == 'VALIDATION_ERROR'
        category = client.get(
            f"/api/admin/projects/{catalog['project']['id']}/categories", headers=api_headers['admin']
        ).get_json()['data'][0]
        assert [group['id'] for group in category['tagGroupConfigs']] == ['grp_type', 'grp_platform']

    def test_admin_category_listing_requires_staff(self, client, api_headers, catalog):
        url = f"/api/admin/projects/{catalog['project']['id']}/categories"

        assert client.get(url).status_code == 401
        assert client.get(url, headers=api_headers['user']).status_code == 403

    def test_tag_group_sources(self, client, api_headers, catalog):
        response = client.get(
            f"/api/admin/projects/{catalog['project']['id']}/tag-group-sources", headers=api_headers['admin']
        )
        sources = response.get_json()['data']

        assert [source['groupConfig']['id'] for source in sources] == ['grp_type', 'grp_platform']
        assert sources[0]['sourceCategoryName'] == 'Mods'

    def test_public_project_listing(self, client, catalog):
        response = client.get('/api/projects?itemType=game')
        projects = response.get_json()['data']

        assert [project['slug'] for project in projects] == ['star-quest']
        assert projects[0]['categories'][0]['slug'] == 'mods'
        assert projects[0]['stats']['totalResources'] == 0

    def test_filter_groups(self, client, catalog):
        response = client.get('/api/projects/game/star-quest/categories/mods/filter-groups')
        groups = response.get_json()['data']

        assert [group['displayName'] for group in groups] == ['Type', 'Platform']

    def test_resource_listing_with_tags(self, client, api_headers, catalog):
        _create_resource(client, api_headers['user'], catalog, name='Sky')
        _create_resource(client, api_headers['user'], catalog, name='Rain', selectedDynamicTags={'grp_type': ['tag_fps']})

        response = client.get('/api/projects/game/star-quest/categories/mods/resources?tags=tag_fps')
        data = response.get_json()['data']

        assert data['total'] == 1
        assert data['hasMore'] is False
        assert data['items'][0]['name'] == 'Rain'
        assert data['items'][0]['tags'][0]['name'] == 'FPS'


class TestResourceEndpoints:
    """Tests for resource, review and profile endpoints"""

    def test_create_and_fetch(self, client, api_headers, catalog):
        response = _create_resource(client, api_headers['user'], catalog)
        body = response.get_json()['data']

        assert response.status_code == 201
        assert body['revalidatePaths'][-1] == '/games/star-quest/mods/better-sky'

        detail = client.get('/api/resources/better-sky').get_json()['data']
        assert detail['authors'][0]['isCreator'] is True
        assert detail['reviews'] == []

    def test_create_requires_login(self, client, catalog):
        response = _create_resource(client, {}, catalog)
        assert response.get_json()['errorCode'] == 'AUTH_REQUIRED'

    def test_review_rules(self, client, api_headers, catalog):
        resource_id = _create_resource(client, api_headers['user'], catalog).get_json()['data']['resource']['id']
        review = {'isRecommended': True, 'comment': 'Lovely'}

        own = client.post(f'/api/resources/{resource_id}/reviews', json=review, headers=api_headers['user'])
        assert own.status_code == 403
        assert own.get_json()['errorCode'] == 'NOT_AUTHOR'

        first = client.post(f'/api/resources/{resource_id}/reviews', json=review, headers=api_headers['cat'])
        assert first.status_code == 201
        review_id = first.get_json()['data']['reviewId']

        again = client.post(f'/api/resources/{resource_id}/reviews', json=review, headers=api_headers['cat'])
        assert again.status_code == 409
        assert again.get_json()['errorCode'] == 'ALREADY_REVIEWED'

        toggled = client.post(
            f'/api/reviews/{review_id}/interactions', json={'interaction': 'helpful'}, headers=api_headers['mod']
        )
        assert toggled.get_json()['data']['updatedCounts']['helpful'] == 1

        anonymous = client.get(f'/api/reviews/{review_id}/sentiment').get_json()
        assert anonymous == {'success': True, 'data': {'sentiment': None, 'isFunny': False}}

    def test_profile_page(self, client, api_headers, catalog):
        _create_resource(client, api_headers['user'], catalog)

        data = client.get('/api/profiles/user').get_json()['data']

        assert data['profile']['usertag'] == '@user'
        assert data['stats']['totalResources'] == 1
        assert data['topResources'][0]['rank'] == 1

    def test_update_me(self, client, api_headers):
        response = client.put('/api/profiles/me', json={'bio': 'Hello'}, headers=api_headers['cat'])
        assert response.get_json()['data']['bio'] == 'Hello'
