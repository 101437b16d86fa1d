# tests/test_contact.py
import uuid

from inkpress.extensions import db
from inkpress.models import Contact, ContactStatus


def test_valid_contact_is_stored_unread(client, app):
    response = client.post('/api/contact', json={'name': 'Jane', 'email': 'jane@x.com', 'message': 'hi'})

    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['message'].startswith('Your message has been sent')
    assert data['contactId']

    with app.app_context():
        contact = db.session.get(Contact, uuid.UUID(data['contactId']))
        assert contact is not None
        assert contact.status == ContactStatus.UNREAD
        assert contact.subject is None
        assert contact.message == 'hi'


def test_invalid_email_is_rejected(client, app):
    for email in ('not-an-email', 'jane@localhost', '@x.com', 'jane doe@x.com'):
        response = client.post('/api/contact', json={'name': 'Jane', 'email': email, 'message': 'hi'})
        assert response.status_code == 400, email
        assert response.get_json() == {'success': False, 'error': 'Please provide a valid email address'}

    with app.app_context():
        assert Contact.query.count() == 0


def test_missing_fields_are_rejected(client, app):
    response = client.post('/api/contact', json={'name': 'Jane', 'email': 'jane@x.com'})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Name, email, and message are required'
    with app.app_context():
        assert Contact.query.count() == 0


def test_subject_is_optional_but_kept(client, app):
    response = client.post('/api/contact', json={
        'name': 'Jane', 'email': 'jane@x.com', 'subject': 'Hello', 'message': 'hi'
    })
    assert response.status_code == 200
    with app.app_context():
        assert Contact.query.one().subject == 'Hello'


def test_list_contacts_newest_first(client, app):
    client.post('/api/contact', json={'name': 'First', 'email': 'first@x.com', 'message': 'one'})
    client.post('/api/contact', json={'name': 'Second', 'email': 'second@x.com', 'message': 'two'})

    response = client.get('/api/contact')

    assert response.status_code == 200
    contacts = response.get_json()['contacts']
    assert [c['name'] for c in contacts] == ['Second', 'First']
    assert all(c['status'] == 'UNREAD' for c in contacts)


def test_non_string_values_are_rejected(client, app):
    response = client.post('/api/contact', json={'name': ['Jane'], 'email': 'jane@x.com', 'message': 'hi'})
    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'error': 'name must be a string'}

    response = client.post('/api/contact', json={'name': 'Jane', 'email': 'jane@x.com', 'message': True})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'message must be a string'

    with app.app_context():
        assert Contact.query.count() == 0
