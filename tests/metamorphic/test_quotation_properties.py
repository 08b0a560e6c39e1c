"""
Property-based tests over the bundled rule table.

Properties checked for arbitrary well-formed requests:
- Determinism: same request, table and clock value give equal quotations
- Non-negativity: every line amount and the total are >= 0
- Conservation: total equals the sum of line amounts
- Cardinality: a Mainland request with more than one activity is rejected
- Monotonicity: adding a visa never lowers the total
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from quote_config import get_active_rule_table
from quote_engines import compute
from quote_engines.resolver import MAX_SHAREHOLDERS, MAX_VISAS
from quote_kernel.domain import errors
from quote_kernel.domain.clock import FixedClock
from quote_kernel.domain.request import (
    BusinessActivity,
    Emirate,
    Jurisdiction,
    OfficeSpace,
    QuotationRequest,
)

RULE_TABLE = get_active_rule_table()

_SETTINGS = settings(
    max_examples=150,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


@st.composite
def requests(draw):
    jurisdiction = draw(st.sampled_from(list(Jurisdiction)))
    if jurisdiction is Jurisdiction.MAINLAND:
        activities = [draw(st.sampled_from(list(BusinessActivity)))]
    else:
        activities = draw(
            st.lists(st.sampled_from(list(BusinessActivity)), min_size=1, max_size=3, unique=True)
        )
    return QuotationRequest(
        jurisdiction=jurisdiction,
        emirate=draw(st.sampled_from(list(Emirate))),
        activities=activities,
        office_space=draw(st.sampled_from(list(OfficeSpace))),
        shareholders=draw(st.integers(min_value=1, max_value=MAX_SHAREHOLDERS)),
        visas=draw(st.integers(min_value=0, max_value=MAX_VISAS)),
    )


class TestQuotationProperties:
    @_SETTINGS
    @given(request=requests())
    def test_determinism(self, request):
        first = compute(request, RULE_TABLE, FixedClock())
        second = compute(request, RULE_TABLE, FixedClock())
        assert first == second

    @_SETTINGS
    @given(request=requests())
    def test_non_negative_and_conserved(self, request):
        quotation = compute(request, RULE_TABLE, FixedClock()).unwrap()
        amounts = [item.amount.minor_units for item in quotation.line_items]
        assert all(amount >= 0 for amount in amounts)
        assert quotation.total.minor_units == sum(amounts)

    @_SETTINGS
    @given(request=requests())
    def test_provisional_iff_undecided(self, request):
        quotation = compute(request, RULE_TABLE, FixedClock()).unwrap()
        assert quotation.is_provisional == (request.office_space is OfficeSpace.UNDECIDED)

    @_SETTINGS
    @given(
        emirate=st.sampled_from(list(Emirate)),
        activities=st.lists(
            st.sampled_from(list(BusinessActivity)), min_size=2, max_size=3, unique=True
        ),
    )
    def test_mainland_cardinality(self, emirate, activities):
        request = QuotationRequest(
            jurisdiction=Jurisdiction.MAINLAND,
            emirate=emirate,
            activities=activities,
            office_space=OfficeSpace.NO,
            shareholders=1,
            visas=0,
        )
        result = compute(request, RULE_TABLE, FixedClock())
        assert result.is_validation_error
        assert result.error.code == errors.CARDINALITY_VIOLATION

    @_SETTINGS
    @given(request=requests())
    def test_extra_visa_never_cheaper(self, request):
        if request.visas == MAX_VISAS:
            return
        more = QuotationRequest(
            jurisdiction=request.jurisdiction,
            emirate=request.emirate,
            activities=request.activities,
            office_space=request.office_space,
            shareholders=request.shareholders,
            visas=request.visas + 1,
        )
        base_total = compute(request, RULE_TABLE, FixedClock()).unwrap().total
        more_total = compute(more, RULE_TABLE, FixedClock()).unwrap().total
        assert base_total <= more_total
