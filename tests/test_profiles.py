"""
Tests for public profiles and profile edits
"""
import pytest

from exceptions import AuthenticationException, NotFoundException, ValidationException
from services.profile_service import ProfileService
from services.resource_service import ResourceService
from services.review_service import ReviewService


def _publish(session, actor, project, category, name):
    resource, _ = ResourceService(session).save_resource(
        actor, {'name': name, 'files': []}, project_id=project.id, category_id=category.id
    )
    return resource


class TestProfileService:
    """Tests for profile pages and stats"""

    def test_usertag_with_or_without_at(self, session, profiles):
        service = ProfileService(session)
        assert service.get_by_usertag('creativecat').id == 'another-user-id'
        assert service.get_by_usertag('@creativecat').id == 'another-user-id'
        with pytest.raises(NotFoundException):
            service.get_by_usertag('@nobody')

    def test_badges(self, profiles):
        assert [badge['id'] for badge in profiles['admin'].badges()] == ['badge-admin', 'badge-verified']
        assert [badge['id'] for badge in profiles['user'].badges()] == ['badge-verified']

    def test_stats_weight_rating_by_review_count(self, session, profiles, project, category):
        first = _publish(session, profiles['user'], project, category, 'Alpha')
        second = _publish(session, profiles['user'], project, category, 'Beta')
        _publish(session, profiles['user'], project, category, 'Gamma')
        reviews = ReviewService(session)
        reviews.add_review(profiles['cat'], first.id, {'isRecommended': True, 'comment': 'Good'})
        reviews.add_review(profiles['mod'], first.id, {'isRecommended': True, 'comment': 'Good'})
        reviews.add_review(profiles['cat'], second.id, {'isRecommended': False, 'comment': 'Bad'})

        stats = ProfileService(session).user_stats('mock-user-id')

        assert stats['totalResources'] == 3
        assert stats['totalReviews'] == 0
        assert stats['overallResourceReviewCount'] == 3
        assert stats['overallResourceRating'] == pytest.approx((5 * 2 + 0 * 1) / 3)
        assert ProfileService(session).user_stats('another-user-id')['totalReviews'] == 2

    def test_stats_without_reviews(self, session, profiles):
        stats = ProfileService(session).user_stats('mock-user-id')
        assert stats['overallResourceRating'] is None
        assert stats['totalResources'] == 0

    def test_top_resources_are_ranked(self, session, profiles, project, category):
        resources = [_publish(session, profiles['user'], project, category, name) for name in ('A', 'B', 'C', 'D')]
        service = ResourceService(session)
        for _ in range(3):
            service.increment_download(resources[2].id)
        service.increment_download(resources[0].id)

        top = ProfileService(session).top_resources('mock-user-id')

        assert [item['rank'] for item in top] == [1, 2, 3]
        assert [item['id'] for item in top[:2]] == [resources[2].id, resources[0].id]

    def test_profile_page_excludes_top(self, session, profiles, project, category):
        for name in ('A', 'B', 'C', 'D'):
            _publish(session, profiles['user'], project, category, name)

        page = ProfileService(session).profile_page('@user')

        assert len(page['topResources']) == 3
        assert len(page['resources']) == 1
        assert page['resources'][0]['id'] not in {item['id'] for item in page['topResources']}

    def test_published_resources_sorting(self, session, profiles, project, category):
        first = _publish(session, profiles['user'], project, category, 'A')
        second = _publish(session, profiles['user'], project, category, 'B')
        service = ProfileService(session)

        ascending = service.published_resources('mock-user-id', order='ASC')
        assert [item['id'] for item in ascending] == [first.id, second.id]
        assert [item['id'] for item in service.published_resources('mock-user-id', exclude_ids=[first.id])] == [second.id]

    def test_update_own_profile(self, session, profiles):
        profile = ProfileService(session).update_own_profile(
            profiles['user'], {'name': ' New Name ', 'bio': 'Hi', 'socialLinks': {'github': 'https://github.com/u'}}
        )
        assert profile.name == 'New Name'
        assert profile.social_links == {'github': 'https://github.com/u'}

    def test_update_requires_login(self, session):
        with pytest.raises(AuthenticationException):
            ProfileService(session).update_own_profile(None, {'bio': 'x'})

    def test_update_rejects_empty_name(self, session, profiles):
        with pytest.raises(ValidationException):
            ProfileService(session).update_own_profile(profiles['user'], {'name': ''})
