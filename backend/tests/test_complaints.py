"""
Tests for complaint submission, ownership and comments
"""
import pytest
import cloudinary.uploader
from httpx import AsyncClient
from sqlalchemy import select
from app.models.comment import Comment
from app.models.user import User
from app.models.notification import Notification
from app.services import media_service as media_module


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / 'uploads'
    monkeypatch.setattr(media_module.settings, 'upload_dir', str(directory))
    return directory


@pytest.fixture
def cloudinary_ok(monkeypatch):
    calls = []

    def fake_upload(path, **options):
        calls.append((path, options))
        return {
            'secure_url': 'https://res.cloudinary.com/demo/image/upload/v1/photo.png',
            'public_id': 'photo',
        }

    monkeypatch.setattr(cloudinary.uploader, 'upload', fake_upload)
    return calls


class TestCreateComplaint:
    async def test_create_without_file(
        self, client: AsyncClient, session_factory, test_user, admin_user, auth_headers
    ):
        response = await client.post(
            '/api/complaints',
            data={
                'title': 'Leaking roof',
                'description': 'Water drips in the hostel corridor.',
                'category': 'Hostel',
                'priority': 'high',
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()['data']
        assert data['status'] == 'pending'
        assert data['submitted_by'] == test_user.id
        assert data['owner']['name'] == test_user.name
        assert data['attachments'] == []

        async with session_factory() as session:
            user = await session.get(User, test_user.id)
            assert user.complaints_submitted == 1
            notes = (await session.execute(
                select(Notification).where(Notification.recipient_id == admin_user.id)
            )).scalars().all()
            assert len(notes) == 1
            assert notes[0].type == 'complaint_created'

    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post(
            '/api/complaints',
            data={'title': 'x', 'description': 'y', 'category': 'Other'},
        )

        assert response.status_code == 401

    async def test_invalid_category(self, client: AsyncClient, auth_headers):
        response = await client.post(
            '/api/complaints',
            data={'title': 'x', 'description': 'y', 'category': 'Weather'},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['detail'] == 'Please select a valid category'

    async def test_create_with_file(self, client: AsyncClient, auth_headers, upload_dir, cloudinary_ok):
        response = await client.post(
            '/api/complaints',
            data={'title': 'Broken window', 'description': 'See photo', 'category': 'Infrastructure'},
            files={'file': ('window photo.png', b'\x89PNG fake bytes', 'image/png')},
            headers=auth_headers,
        )

        assert response.status_code == 201
        attachment = response.json()['data']['attachments'][0]
        assert attachment['url'] == 'https://res.cloudinary.com/demo/image/upload/v1/photo.png'
        assert attachment['cloudinary_id'] == 'photo'
        assert attachment['original_name'] == 'window photo.png'
        assert attachment['mimetype'] == 'image/png'
        assert attachment['filename'].startswith('window_photo-')

        # uploaded with auto resource type, staged copy removed afterwards
        path, options = cloudinary_ok[0]
        assert options == {'resource_type': 'auto'}
        assert path.startswith(str(upload_dir / 'images'))
        assert list((upload_dir / 'images').iterdir()) == []

    async def test_disallowed_file_type(self, client: AsyncClient, auth_headers, upload_dir, cloudinary_ok):
        response = await client.post(
            '/api/complaints',
            data={'title': 'Script', 'description': 'Run this', 'category': 'Technology'},
            files={'file': ('run.sh', b'#!/bin/sh', 'application/x-sh')},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['detail'] == 'File type application/x-sh is not allowed'
        assert cloudinary_ok == []

    async def test_upload_failure(self, client: AsyncClient, auth_headers, upload_dir, monkeypatch):
        def failing_upload(path, **options):
            raise RuntimeError('cloudinary is down')

        monkeypatch.setattr(cloudinary.uploader, 'upload', failing_upload)

        response = await client.post(
            '/api/complaints',
            data={'title': 'Doc', 'description': 'Attached', 'category': 'Academic'},
            files={'file': ('notes.pdf', b'%PDF-1.4', 'application/pdf')},
            headers=auth_headers,
        )

        assert response.status_code == 502
        assert response.json()['detail'] == 'File upload failed'
        assert list((upload_dir / 'documents').iterdir()) == []

    @pytest.mark.parametrize('fields,detail', [
        ({'title': 'Photo', 'description': 'See file', 'category': 'NotACategory'}, 'Please select a valid category'),
        ({'title': '   ', 'description': 'See file', 'category': 'Hostel'}, 'Please provide a title'),
        ({'title': 'Photo', 'description': ' ', 'category': 'Hostel'}, 'Please provide a description'),
        ({'title': 'Photo', 'description': 'See file', 'category': 'Hostel', 'priority': 'asap'}, 'Invalid priority'),
    ])
    async def test_invalid_fields_skip_upload(
        self, client: AsyncClient, auth_headers, upload_dir, cloudinary_ok, fields, detail
    ):
        response = await client.post(
            '/api/complaints',
            data=fields,
            files={'file': ('photo.png', b'\x89PNG fake bytes', 'image/png')},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['detail'] == detail
        assert cloudinary_ok == []
        assert not upload_dir.exists()


class TestListComplaints:
    async def test_public_list(self, client: AsyncClient, auth_headers, create_complaint):
        await create_complaint(auth_headers, category='Food')
        await create_complaint(auth_headers, category='Library')

        response = await client.get('/api/complaints?category=Food')

        assert response.status_code == 200
        body = response.json()
        assert body['total'] == 1
        assert body['pages'] == 1
        assert body['data'][0]['category'] == 'Food'

    async def test_my_complaints(
        self, client: AsyncClient, auth_headers, other_headers, create_complaint
    ):
        await create_complaint(auth_headers, title='Mine')
        await create_complaint(other_headers, title='Theirs')

        response = await client.get('/api/complaints/user/me', headers=auth_headers)

        assert [c['title'] for c in response.json()['data']] == ['Mine']

    async def test_get_missing(self, client: AsyncClient):
        response = await client.get('/api/complaints/9999')

        assert response.status_code == 404


class TestOwnership:
    async def test_owner_update(self, client: AsyncClient, auth_headers, create_complaint):
        complaint = await create_complaint(auth_headers)

        response = await client.put(
            f"/api/complaints/{complaint['id']}",
            json={'title': 'Projector still broken', 'priority': 'high'},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()['data']
        assert data['title'] == 'Projector still broken'
        assert data['priority'] == 'high'

    async def test_non_owner_update(self, client: AsyncClient, auth_headers, other_headers, create_complaint):
        complaint = await create_complaint(auth_headers)

        response = await client.put(
            f"/api/complaints/{complaint['id']}", json={'title': 'Hijacked'}, headers=other_headers
        )

        assert response.status_code == 401
        fetched = await client.get(f"/api/complaints/{complaint['id']}")
        assert fetched.json()['data']['title'] == complaint['title']

    async def test_owner_delete(self, client: AsyncClient, auth_headers, create_complaint):
        complaint = await create_complaint(auth_headers)
        await client.post(
            f"/api/complaints/{complaint['id']}/comments", json={'content': 'bump'}, headers=auth_headers
        )

        response = await client.delete(f"/api/complaints/{complaint['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert (await client.get(f"/api/complaints/{complaint['id']}")).status_code == 404

    async def test_non_owner_delete(self, client: AsyncClient, auth_headers, other_headers, create_complaint):
        complaint = await create_complaint(auth_headers)

        response = await client.delete(f"/api/complaints/{complaint['id']}", headers=other_headers)

        assert response.status_code == 401

    async def test_admin_can_delete(self, client: AsyncClient, auth_headers, admin_headers, create_complaint):
        complaint = await create_complaint(auth_headers)

        response = await client.delete(f"/api/complaints/{complaint['id']}", headers=admin_headers)

        assert response.status_code == 200


class TestComments:
    async def test_comment_flow(
        self, client: AsyncClient, session_factory, test_user, other_user,
        auth_headers, other_headers, create_complaint,
    ):
        complaint = await create_complaint(auth_headers)
        url = f"/api/complaints/{complaint['id']}/comments"

        response = await client.post(url, json={'content': 'Same issue here'}, headers=other_headers)

        assert response.status_code == 201
        assert response.json()['data']['author']['id'] == other_user.id

        listed = await client.get(url)
        assert listed.json()['count'] == 1
        assert listed.json()['data'][0]['content'] == 'Same issue here'

        async with session_factory() as session:
            notes = (await session.execute(
                select(Notification).where(
                    Notification.recipient_id == test_user.id,
                    Notification.type == 'comment_added',
                )
            )).scalars().all()
            assert len(notes) == 1

    async def test_empty_comment(self, client: AsyncClient, auth_headers, create_complaint):
        complaint = await create_complaint(auth_headers)

        response = await client.post(
            f"/api/complaints/{complaint['id']}/comments", json={'content': ' '}, headers=auth_headers
        )

        assert response.status_code == 400

    async def test_author_edits_comment(self, client: AsyncClient, auth_headers, create_complaint):
        complaint = await create_complaint(auth_headers)
        url = f"/api/complaints/{complaint['id']}/comments"
        comment = (await client.post(url, json={'content': 'Frist'}, headers=auth_headers)).json()['data']

        response = await client.put(f"{url}/{comment['id']}", json={'content': ' First '}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['data']['content'] == 'First'
        listed = await client.get(url)
        assert [c['content'] for c in listed.json()['data']] == ['First']

    async def test_other_user_cannot_edit_or_delete(
        self, client: AsyncClient, auth_headers, other_headers, create_complaint
    ):
        complaint = await create_complaint(auth_headers)
        url = f"/api/complaints/{complaint['id']}/comments"
        comment = (await client.post(url, json={'content': 'Mine'}, headers=auth_headers)).json()['data']

        edit = await client.put(f"{url}/{comment['id']}", json={'content': 'Theirs'}, headers=other_headers)
        delete = await client.delete(f"{url}/{comment['id']}", headers=other_headers)

        assert edit.status_code == 401
        assert edit.json()['detail'] == 'Not authorized to update this comment'
        assert delete.status_code == 401
        assert delete.json()['detail'] == 'Not authorized to delete this comment'
        listed = await client.get(url)
        assert [c['content'] for c in listed.json()['data']] == ['Mine']

    async def test_delete_is_soft(
        self, client: AsyncClient, session_factory, auth_headers, admin_headers, create_complaint
    ):
        complaint = await create_complaint(auth_headers)
        url = f"/api/complaints/{complaint['id']}/comments"
        comment = (await client.post(url, json={'content': 'Oops'}, headers=auth_headers)).json()['data']

        response = await client.delete(f"{url}/{comment['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['message'] == 'Comment deleted successfully'
        assert (await client.get(url)).json()['count'] == 0
        dashboard = await client.get('/api/admin/dashboard', headers=admin_headers)
        assert dashboard.json()['data']['overview']['totalComments'] == 0
        async with session_factory() as session:
            stored = await session.get(Comment, comment['id'])
            assert stored.is_deleted is True

        # a deleted comment can no longer be edited or deleted again
        again = await client.delete(f"{url}/{comment['id']}", headers=auth_headers)
        assert again.status_code == 404

    async def test_admin_can_delete_any_comment(
        self, client: AsyncClient, auth_headers, admin_headers, create_complaint
    ):
        complaint = await create_complaint(auth_headers)
        url = f"/api/complaints/{complaint['id']}/comments"
        comment = (await client.post(url, json={'content': 'Spam'}, headers=auth_headers)).json()['data']

        response = await client.delete(f"{url}/{comment['id']}", headers=admin_headers)

        assert response.status_code == 200

    async def test_comment_on_other_complaint_not_found(
        self, client: AsyncClient, auth_headers, create_complaint
    ):
        first = await create_complaint(auth_headers)
        second = await create_complaint(auth_headers)
        comment = (await client.post(
            f"/api/complaints/{first['id']}/comments", json={'content': 'Here'}, headers=auth_headers
        )).json()['data']

        response = await client.put(
            f"/api/complaints/{second['id']}/comments/{comment['id']}",
            json={'content': 'Moved'},
            headers=auth_headers,
        )

        assert response.status_code == 404


class TestAvatar:
    async def test_upload_avatar(self, client: AsyncClient, auth_headers, upload_dir, cloudinary_ok):
        response = await client.put(
            '/api/users/avatar',
            files={'file': ('me.png', b'\x89PNG fake bytes', 'image/png')},
            headers=auth_headers,
        )

        assert response.status_code == 200
        avatar = response.json()['data']['avatar']
        assert avatar == 'https://res.cloudinary.com/demo/image/upload/v1/photo.png'
        me = await client.get('/api/auth/me', headers=auth_headers)
        assert me.json()['data']['user']['avatar'] == avatar

    async def test_avatar_must_be_image(self, client: AsyncClient, auth_headers, upload_dir, cloudinary_ok):
        response = await client.put(
            '/api/users/avatar',
            files={'file': ('cv.pdf', b'%PDF-1.4', 'application/pdf')},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['detail'] == 'Please upload a valid image file'
        assert cloudinary_ok == []

    async def test_avatar_requires_auth(self, client: AsyncClient):
        response = await client.put(
            '/api/users/avatar', files={'file': ('me.png', b'\x89PNG', 'image/png')}
        )

        assert response.status_code == 401
