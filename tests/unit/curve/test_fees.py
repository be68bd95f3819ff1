"""Tests for the dynamic fee model."""

from pcl_engine.curve.fees import calc_provide_fee, fee_rate, split_fee
from pcl_engine.math.fixed_point import Decimal256
from tests.helpers import make_pool_params


def dec(value: str | int) -> Decimal256:
    return Decimal256.from_decimal(value)


class TestFeeRate:
    """fee_rate moves from mid_fee toward out_fee with imbalance."""

    def test_balanced_pool_charges_mid_fee(self):
        params = make_pool_params()
        assert fee_rate([dec(1000), dec(1000)], params) == params.mid_fee

    def test_imbalanced_pool_charges_more(self):
        params = make_pool_params()
        rate = fee_rate([dec(1000), dec(10)], params)
        assert params.mid_fee < rate <= params.out_fee

    def test_fee_grows_with_imbalance(self):
        params = make_pool_params()
        slight = fee_rate([dec(1000), dec(990)], params)
        strong = fee_rate([dec(1000), dec(500)], params)
        assert slight < strong

    def test_empty_pool_charges_out_fee(self):
        params = make_pool_params()
        assert fee_rate([Decimal256.zero(), Decimal256.zero()], params) == params.out_fee

    def test_large_fee_gamma_keeps_fee_near_mid(self):
        params = make_pool_params(fee_gamma=Decimal256.one())
        narrow = make_pool_params()
        xp = [dec(1000), dec(500)]
        assert fee_rate(xp, params) < fee_rate(xp, narrow)



class TestProvideFee:
    def test_balanced_deposit_is_free(self):
        params = make_pool_params()
        fee = calc_provide_fee([dec(100), dec(100)], [dec(1000), dec(1000)], params)
        assert fee == Decimal256.zero()

    def test_one_sided_deposit(self):
        """A one-sided deposit pays half the current fee rate."""
        params = make_pool_params()
        fee = calc_provide_fee([dec(100), Decimal256.zero()], [dec(1000), dec(1000)], params)
        assert fee == dec("0.0013")

    def test_empty_deposit(self):
        params = make_pool_params()
        fee = calc_provide_fee([Decimal256.zero(), Decimal256.zero()], [dec(1000), dec(1000)], params)
        assert fee == Decimal256.zero()


class TestSplitFee:
    def test_half_to_maker(self):
        lp_fee, maker_fee = split_fee(dec("0.003"), dec("0.5"))
        assert lp_fee == maker_fee == dec("0.0015")

    def test_parts_sum_to_total(self):
        total = Decimal256.raw(1001)
        lp_fee, maker_fee = split_fee(total, dec("0.3"))
        assert lp_fee + maker_fee == total

    def test_no_maker(self):
        assert split_fee(dec("0.003"), Decimal256.zero()) == (dec("0.003"), Decimal256.zero())
