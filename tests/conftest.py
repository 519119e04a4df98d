"""Shared fixtures: users in each role, jobs in each lifecycle stage, and
authenticated API clients."""
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from core.constants import JobStatus, MilestoneStatus, PartyRole
from apps.jobs.models import Job, Milestone

User = get_user_model()


def make_user(username, client=False, freelancer=False):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="s3cret-pass",
        is_client=client,
        is_freelancer=freelancer,
    )


def make_job(creator, status=JobStatus.DRAFT, milestones=(), **fields):
    fields.setdefault('title', 'Build a landing page')
    fields.setdefault('category', 'Web Development')
    fields.setdefault('budget_min', Decimal('1000'))
    job = Job.objects.create(creator=creator, status=status, **fields)
    job.add_party(creator, PartyRole.CREATOR)
    for position, value in enumerate(milestones):
        Milestone.objects.create(
            job=job, position=position, title=f"Milestone {position}",
            value=Decimal(value), status=MilestoneStatus.ACTIVE
        )
    return job


def hire(job, freelancer):
    job.status = JobStatus.IN_PROGRESS
    job.hired_freelancer = freelancer
    job.save()
    job.add_party(freelancer, PartyRole.CONTRACTOR)
    return job


@pytest.fixture
def client_user(db):
    return make_user('alice', client=True)


@pytest.fixture
def freelancer(db):
    return make_user('bob', freelancer=True)


@pytest.fixture
def other_freelancer(db):
    return make_user('carol', freelancer=True)


@pytest.fixture
def outsider(db):
    return make_user('mallory', client=True, freelancer=True)


@pytest.fixture
def draft_job(client_user):
    return make_job(client_user)


@pytest.fixture
def open_job(client_user):
    return make_job(client_user, status=JobStatus.OPEN)


@pytest.fixture
def active_job(client_user, freelancer):
    job = make_job(client_user, status=JobStatus.OPEN, milestones=('500', '500'))
    return hire(job, freelancer)


@pytest.fixture
def api_client():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def job_factory(db):
    return make_job


@pytest.fixture
def user_factory(db):
    return make_user
