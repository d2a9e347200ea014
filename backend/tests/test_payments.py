from datetime import date

import pytest
from httpx import AsyncClient


@pytest.fixture
def record_payment(client: AsyncClient, auth_headers: dict):
    async def _record(candidate_id: str, amount: float, **overrides):
        payload = {'candidate_id': candidate_id, 'amount': amount}
        payload.update(overrides)
        response = await client.post('/api/v1/payments', json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()['data']
    return _record


@pytest.fixture
def make_plan(client: AsyncClient, auth_headers: dict):
    async def _make(**overrides) -> dict:
        payload = {'name': 'Three installments', 'number_of_installments': 3, 'total_amount': 34000}
        payload.update(overrides)
        response = await client.post('/api/v1/payment-plans', json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()['data']
    return _make


async def paid_amount(client: AsyncClient, headers: dict, candidate_id: str) -> float:
    response = await client.get(f'/api/v1/candidates/{candidate_id}', headers=headers)
    return response.json()['data']['paid_amount']


# ==========================================
# Payments
# ==========================================

@pytest.mark.asyncio
async def test_record_pending_payment(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.post(
        '/api/v1/payments',
        json={'candidate_id': candidate['id'], 'amount': 5000, 'method': 'card'},
        headers=auth_headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body['message'] == 'Payment recorded successfully'
    assert body['data']['status'] == 'pending'
    assert body['data']['date'] == date.today().isoformat()
    assert await paid_amount(client, auth_headers, candidate['id']) == 0.0


@pytest.mark.asyncio
async def test_payment_for_unknown_candidate(client: AsyncClient, auth_headers):
    response = await client.post(
        '/api/v1/payments',
        json={'candidate_id': 'nobody', 'amount': 100},
        headers=auth_headers
    )

    assert response.status_code == 404
    assert response.json()['error'] == 'Candidate not found'


@pytest.mark.asyncio
async def test_negative_amount_rejected(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.post(
        '/api/v1/payments',
        json={'candidate_id': candidate['id'], 'amount': -5},
        headers=auth_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_paid_amount_follows_payments(client: AsyncClient, auth_headers, make_candidate, record_payment):
    candidate = await make_candidate()

    paid = await record_payment(candidate['id'], 10000, status='paid')
    assert await paid_amount(client, auth_headers, candidate['id']) == 10000.0

    pending = await record_payment(candidate['id'], 4000)
    response = await client.put(f"/api/v1/payments/{pending['id']}/mark-paid", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()['data']['status'] == 'paid'
    assert await paid_amount(client, auth_headers, candidate['id']) == 14000.0

    response = await client.put(f"/api/v1/payments/{paid['id']}", json={'amount': 8000}, headers=auth_headers)
    assert response.status_code == 200
    assert await paid_amount(client, auth_headers, candidate['id']) == 12000.0

    response = await client.delete(f"/api/v1/payments/{pending['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert await paid_amount(client, auth_headers, candidate['id']) == 8000.0

    response = await client.get(f"/api/v1/candidates/{candidate['id']}", headers=auth_headers)
    assert response.json()['data']['remaining_amount'] == 26000.0


@pytest.mark.asyncio
async def test_mark_paid_twice(client: AsyncClient, auth_headers, make_candidate, record_payment):
    candidate = await make_candidate()
    payment = await record_payment(candidate['id'], 1000)
    await client.put(f"/api/v1/payments/{payment['id']}/mark-paid", headers=auth_headers)

    response = await client.put(f"/api/v1/payments/{payment['id']}/mark-paid", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()['error'] == 'Payment is already marked as paid'
    assert await paid_amount(client, auth_headers, candidate['id']) == 1000.0


@pytest.mark.asyncio
async def test_pending_payments(client: AsyncClient, auth_headers, make_candidate, record_payment):
    candidate = await make_candidate()
    await record_payment(candidate['id'], 1500)
    await record_payment(candidate['id'], 2500)
    await record_payment(candidate['id'], 9000, status='paid')

    response = await client.get('/api/v1/payments/pending', headers=auth_headers)
    body = response.json()
    assert body['count'] == 2
    assert body['total_pending_amount'] == 4000.0

    response = await client.get('/api/v1/payments/pending/count', headers=auth_headers)
    assert response.json()['data'] == {'count': 2, 'total_pending_amount': 4000.0}

    response = await client.get('/api/v1/payments', params={'status': 'paid'}, headers=auth_headers)
    assert response.json()['count'] == 1


@pytest.mark.asyncio
async def test_candidate_payment_summary(client: AsyncClient, auth_headers, make_candidate, record_payment):
    candidate = await make_candidate()
    other = await make_candidate()
    await record_payment(candidate['id'], 3000, status='paid')
    await record_payment(candidate['id'], 1000)
    await record_payment(other['id'], 700)

    response = await client.get(f"/api/v1/payments/candidate/{candidate['id']}", headers=auth_headers)

    body = response.json()
    assert body['count'] == 2
    assert body['summary'] == {'total_paid': 3000.0, 'total_pending': 1000.0, 'payment_count': 2}


@pytest.mark.asyncio
async def test_installment_payment_needs_existing_plan(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.post(
        '/api/v1/payments',
        json={'candidate_id': candidate['id'], 'amount': 100, 'payment_plan_id': 'missing'},
        headers=auth_headers
    )

    assert response.status_code == 404
    assert response.json()['error'] == 'Payment plan not found'


# ==========================================
# Payment plans
# ==========================================

@pytest.mark.asyncio
async def test_payment_plan_crud(client: AsyncClient, auth_headers, make_plan):
    plan = await make_plan()
    assert plan['installment_amount'] == 11333.33

    response = await client.put(
        f"/api/v1/payment-plans/{plan['id']}",
        json={'number_of_installments': 4},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()['data']['installment_amount'] == 8500.0

    response = await client.get('/api/v1/payment-plans', headers=auth_headers)
    assert response.json()['count'] == 1

    response = await client.delete(f"/api/v1/payment-plans/{plan['id']}", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/payment-plans/{plan['id']}", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_plan_in_use_cannot_be_deleted(client: AsyncClient, auth_headers, make_candidate, make_plan):
    candidate = await make_candidate()
    plan = await make_plan()
    response = await client.post(
        '/api/v1/enrollments',
        json={'candidate_id': candidate['id'], 'payment_plan_id': plan['id'], 'license_category': 'B'},
        headers=auth_headers
    )
    assert response.status_code == 201

    response = await client.delete(f"/api/v1/payment-plans/{plan['id']}", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()['error'] == 'Cannot delete a payment plan used by enrollments'


# ==========================================
# Enrollments
# ==========================================

@pytest.mark.asyncio
async def test_enrollment_crud(client: AsyncClient, auth_headers, make_candidate, make_plan):
    candidate = await make_candidate()
    plan = await make_plan()

    response = await client.post(
        '/api/v1/enrollments',
        json={'candidate_id': candidate['id'], 'payment_plan_id': plan['id'], 'license_category': 'B'},
        headers=auth_headers
    )
    assert response.status_code == 201
    enrollment = response.json()['data']
    assert enrollment['status'] == 'active'
    assert enrollment['enrollment_date'] == date.today().isoformat()
    assert enrollment['payment_plan']['name'] == plan['name']

    response = await client.put(
        f"/api/v1/enrollments/{enrollment['id']}",
        json={'status': 'completed'},
        headers=auth_headers
    )
    assert response.json()['data']['status'] == 'completed'

    response = await client.get('/api/v1/enrollments', params={'candidate_id': candidate['id']}, headers=auth_headers)
    assert response.json()['count'] == 1

    response = await client.delete(f"/api/v1/enrollments/{enrollment['id']}", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/enrollments/{enrollment['id']}", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_enrollment_needs_existing_plan(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.post(
        '/api/v1/enrollments',
        json={'candidate_id': candidate['id'], 'payment_plan_id': 'missing', 'license_category': 'B'},
        headers=auth_headers
    )

    assert response.status_code == 404


# ==========================================
# Courses
# ==========================================

@pytest.mark.asyncio
async def test_course_crud(client: AsyncClient, auth_headers):
    response = await client.post(
        '/api/v1/courses',
        json={'type': 'theory', 'title': 'Road signs', 'duration': 2, 'price': 500},
        headers=auth_headers
    )
    assert response.status_code == 201
    course = response.json()['data']

    await client.post(
        '/api/v1/courses',
        json={'type': 'practical', 'title': 'City driving', 'duration': 1.5},
        headers=auth_headers
    )

    response = await client.get('/api/v1/courses', params={'type': 'theory'}, headers=auth_headers)
    assert [c['title'] for c in response.json()['data']] == ['Road signs']

    response = await client.put(f"/api/v1/courses/{course['id']}", json={'price': 650}, headers=auth_headers)
    assert response.json()['data']['price'] == 650.0

    response = await client.delete(f"/api/v1/courses/{course['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()['message'] == 'Course deleted successfully'


@pytest.mark.asyncio
async def test_course_duration_must_be_positive(client: AsyncClient, auth_headers):
    response = await client.post(
        '/api/v1/courses',
        json={'type': 'theory', 'title': 'Road signs', 'duration': 0},
        headers=auth_headers
    )

    assert response.status_code == 400
