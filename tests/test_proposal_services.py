"""Proposal lifecycle service: create, accept (with its fan-out), reject,
withdraw."""
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from core.constants import JobStatus, PartyRole, ProposalStatus
from core.exceptions import ErrorKind, TransitionError
from apps.proposals import services
from apps.proposals.models import Proposal

pytestmark = pytest.mark.django_db


def _propose(job, freelancer, **fields):
    fields.setdefault('cover_letter', 'I can do this.')
    fields.setdefault('delivery_days', 5)
    fields.setdefault('amount', Decimal('900'))
    return services.create_proposal(job, freelancer, fields)


class TestCreateProposal:
    def test_creates_pending_and_counts(self, open_job, freelancer):
        proposal = _propose(open_job, freelancer)
        assert proposal.status == ProposalStatus.PENDING
        open_job.refresh_from_db()
        assert open_job.proposal_count == 1

    def test_own_job_rejected(self, job_factory, outsider):
        job = job_factory(outsider, status=JobStatus.OPEN)
        with pytest.raises(TransitionError) as excinfo:
            _propose(job, outsider)
        assert excinfo.value.kind is ErrorKind.INVALID_STATE
        assert excinfo.value.message == "You cannot submit a proposal on your own job"

    def test_job_must_be_open(self, draft_job, freelancer):
        with pytest.raises(TransitionError) as excinfo:
            _propose(draft_job, freelancer)
        assert excinfo.value.message == "Job is not open for proposals"

    def test_missing_job(self, freelancer):
        with pytest.raises(TransitionError) as excinfo:
            _propose(None, freelancer)
        assert excinfo.value.kind is ErrorKind.NOT_FOUND

    def test_duplicate_rejected(self, open_job, freelancer):
        _propose(open_job, freelancer)
        with pytest.raises(TransitionError) as excinfo:
            _propose(open_job, freelancer)
        assert excinfo.value.message == "You have already submitted a proposal for this job"
        open_job.refresh_from_db()
        assert open_job.proposal_count == 1

    def test_may_propose_again_after_withdrawing(self, open_job, freelancer):
        first = _propose(open_job, freelancer)
        services.withdraw_proposal(first, freelancer)
        second = _propose(open_job, freelancer)
        assert second.status == ProposalStatus.PENDING

    def test_database_enforces_one_active_proposal(self, open_job, freelancer):
        Proposal.objects.create(job=open_job, freelancer=freelancer, cover_letter='a', delivery_days=1)
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Proposal.objects.create(job=open_job, freelancer=freelancer, cover_letter='b', delivery_days=1)


class TestAcceptProposal:
    def test_accept_hires_and_rejects_siblings(self, open_job, client_user, freelancer, other_freelancer):
        chosen = _propose(open_job, freelancer)
        sibling = _propose(open_job, other_freelancer)

        proposal, job = services.accept_proposal(chosen, open_job, client_user)

        assert proposal.status == ProposalStatus.ACCEPTED
        assert proposal.accepted_at is not None
        sibling.refresh_from_db()
        assert sibling.status == ProposalStatus.REJECTED
        assert sibling.rejected_at is not None
        assert sibling.rejection_reason == ''
        assert job.status == JobStatus.IN_PROGRESS
        assert job.hired_freelancer_id == freelancer.id
        contractors = list(job.parties.filter(role=PartyRole.CONTRACTOR).values_list('address_id', flat=True))
        assert contractors == [freelancer.id]

    def test_withdrawn_siblings_stay_withdrawn(self, open_job, client_user, freelancer, other_freelancer):
        chosen = _propose(open_job, freelancer)
        withdrawn = _propose(open_job, other_freelancer)
        services.withdraw_proposal(withdrawn, other_freelancer)

        services.accept_proposal(chosen, open_job, client_user)
        withdrawn.refresh_from_db()
        assert withdrawn.status == ProposalStatus.WITHDRAWN

    def test_accepting_again_is_rejected(self, open_job, client_user, freelancer, other_freelancer):
        chosen = _propose(open_job, freelancer)
        sibling = _propose(open_job, other_freelancer)
        services.accept_proposal(chosen, open_job, client_user)

        for proposal in (chosen, sibling):
            with pytest.raises(TransitionError) as excinfo:
                services.accept_proposal(proposal, open_job, client_user)
            assert excinfo.value.message == "Contract is not open for hiring. Please publish your job first."
        assert open_job.parties.filter(role=PartyRole.CONTRACTOR).count() == 1

    def test_only_creator_can_accept(self, open_job, freelancer, outsider):
        proposal = _propose(open_job, freelancer)
        with pytest.raises(TransitionError) as excinfo:
            services.accept_proposal(proposal, open_job, outsider)
        assert excinfo.value.kind is ErrorKind.FORBIDDEN
        proposal.refresh_from_db()
        assert proposal.status == ProposalStatus.PENDING

    def test_non_pending_proposal_conflicts(self, open_job, client_user, freelancer):
        proposal = _propose(open_job, freelancer)
        services.withdraw_proposal(proposal, freelancer)

        with pytest.raises(TransitionError) as excinfo:
            services.accept_proposal(proposal, open_job, client_user)
        assert excinfo.value.status_code == 409
        assert excinfo.value.message == "Proposal is no longer pending"
        open_job.refresh_from_db()
        assert open_job.status == JobStatus.OPEN
        assert open_job.hired_freelancer is None


class TestRejectProposal:
    def test_reject_with_reason(self, open_job, client_user, freelancer):
        proposal = _propose(open_job, freelancer)
        proposal = services.reject_proposal(proposal, open_job, client_user, '  Over budget ')
        assert proposal.status == ProposalStatus.REJECTED
        assert proposal.rejection_reason == 'Over budget'
        assert proposal.rejected_at is not None

    def test_reject_twice(self, open_job, client_user, freelancer):
        proposal = _propose(open_job, freelancer)
        services.reject_proposal(proposal, open_job, client_user)
        with pytest.raises(TransitionError) as excinfo:
            services.reject_proposal(proposal, open_job, client_user)
        assert excinfo.value.message == "Proposal is already rejected"

    def test_accepted_cannot_be_rejected(self, open_job, client_user, freelancer):
        proposal = _propose(open_job, freelancer)
        services.accept_proposal(proposal, open_job, client_user)
        with pytest.raises(TransitionError) as excinfo:
            services.reject_proposal(proposal, open_job, client_user)
        assert excinfo.value.message == "Accepted proposals cannot be rejected"

    def test_only_creator_can_reject(self, open_job, freelancer, other_freelancer):
        proposal = _propose(open_job, freelancer)
        with pytest.raises(TransitionError) as excinfo:
            services.reject_proposal(proposal, open_job, other_freelancer)
        assert excinfo.value.message == "You can't reject proposals for this job"


class TestWithdrawProposal:
    def test_withdraw_once(self, open_job, freelancer):
        proposal = _propose(open_job, freelancer)
        proposal = services.withdraw_proposal(proposal, freelancer)
        assert proposal.status == ProposalStatus.WITHDRAWN
        assert proposal.withdrawn_at is not None

        with pytest.raises(TransitionError) as excinfo:
            services.withdraw_proposal(proposal, freelancer)
        assert excinfo.value.message == "You can only withdraw pending proposals"

    def test_only_owner_can_withdraw(self, open_job, freelancer, other_freelancer):
        proposal = _propose(open_job, freelancer)
        with pytest.raises(TransitionError) as excinfo:
            services.withdraw_proposal(proposal, other_freelancer)
        assert excinfo.value.kind is ErrorKind.FORBIDDEN

    def test_mark_read(self, open_job, freelancer):
        proposal = _propose(open_job, freelancer)
        services.mark_read(proposal)
        proposal.refresh_from_db()
        assert proposal.is_read is True
