"""
Tests for the notification inbox
"""
from httpx import AsyncClient


async def test_inbox_after_register(client: AsyncClient):
    register = await client.post('/api/auth/register', json={
        'name': 'New Student',
        'email': 'new.student@example.com',
        'password': 'password123',
    })
    headers = {'Authorization': f"Bearer {register.json()['data']['token']}"}

    response = await client.get('/api/notifications', headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body['unread'] == 1
    assert body['notifications'][0]['title'] == 'Welcome to Campus Voice!'


async def test_mark_read(client: AsyncClient, auth_headers, admin_headers, create_complaint):
    complaint = await create_complaint(auth_headers)
    await client.put(
        f"/api/admin/complaints/{complaint['id']}/status",
        json={'status': 'in_progress'},
        headers=admin_headers,
    )
    inbox = (await client.get('/api/notifications', headers=auth_headers)).json()
    assert inbox['unread'] == 1
    notification_id = inbox['notifications'][0]['id']

    response = await client.put(f'/api/notifications/{notification_id}/read', headers=auth_headers)

    assert response.status_code == 200
    assert response.json()['is_read'] is True
    assert response.json()['read_at'] is not None
    inbox = (await client.get('/api/notifications', headers=auth_headers)).json()
    assert inbox['unread'] == 0


async def test_cannot_read_someone_elses(client: AsyncClient, auth_headers, other_headers, admin_headers, create_complaint):
    await create_complaint(auth_headers)
    admin_inbox = (await client.get('/api/notifications', headers=admin_headers)).json()
    notification_id = admin_inbox['notifications'][0]['id']

    response = await client.put(f'/api/notifications/{notification_id}/read', headers=other_headers)

    assert response.status_code == 404
