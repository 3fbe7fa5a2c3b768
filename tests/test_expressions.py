"""式インタプリタのユニットテスト"""

import math
import time
from typing import Any

import pytest
from k1s0_flipper.exceptions import FlipperError, FlipperErrorCodes
from k1s0_flipper.expressions import (
    DEFAULT_REGISTRY,
    All,
    Any as AnyExpression,
    Constant,
    Duration,
    Equal,
    EvaluationContext,
    Expression,
    GreaterThan,
    GreaterThanOrEqualTo,
    LessThan,
    LessThanOrEqualTo,
    NotEqual,
    Now,
    Percentage,
    Property,
    Random,
    Time,
    build_expression,
)


class CountingExpression(Expression):
    name = "Counting"

    def __init__(self, result: Any) -> None:
        super().__init__()
        self.result = result
        self.calls = 0

    def evaluate(self, context: EvaluationContext) -> Any:
        self.calls += 1
        return self.result


def evaluate(literal: Any, **properties: Any) -> Any:
    return build_expression(literal).evaluate(EvaluationContext(feature_name="test", properties=properties))


def test_build_primitive_becomes_constant() -> None:
    """プリミティブは Constant になる。"""
    expression = build_expression("hello")
    assert isinstance(expression, Constant)
    assert expression.evaluate(EvaluationContext()) == "hello"


def test_build_returns_existing_node() -> None:
    """既存のノードはそのまま返す。"""
    node = Property("plan")
    assert build_expression(node) is node


def test_build_nested_expression() -> None:
    """ネストしたオブジェクト表記からツリー全体を構築する。"""
    expression = build_expression({"Equal": [{"Property": "plan"}, "enterprise"]})
    assert isinstance(expression, Equal)
    assert isinstance(expression.args[0], Property)
    assert isinstance(expression.args[1], Constant)


def test_build_unknown_expression() -> None:
    """未知のノード名はメッセージに名前を含めて拒否する。"""
    with pytest.raises(FlipperError) as exc_info:
        build_expression({"Bogus": [1]})
    assert exc_info.value.code == FlipperErrorCodes.UNKNOWN_EXPRESSION
    assert "Bogus" in str(exc_info.value)


def test_build_unbuildable_literal() -> None:
    """リストや複数キーのオブジェクトは構築できない。"""
    with pytest.raises(FlipperError) as exc_info:
        build_expression([1, 2])
    assert exc_info.value.code == FlipperErrorCodes.INVALID_EXPRESSION
    with pytest.raises(FlipperError) as exc_info:
        build_expression({"Equal": [1, 1], "NotEqual": [1, 2]})
    assert exc_info.value.code == FlipperErrorCodes.INVALID_EXPRESSION


def test_build_checks_arity() -> None:
    """構築前に引数の個数を検証する。"""
    with pytest.raises(FlipperError) as exc_info:
        build_expression({"Equal": [1]})
    assert exc_info.value.code == FlipperErrorCodes.INVALID_EXPRESSION
    with pytest.raises(FlipperError):
        build_expression({"Now": [1]})


def test_constant_rejects_non_primitive() -> None:
    """Constant はプリミティブだけを保持する。"""
    with pytest.raises(FlipperError):
        Constant([1, 2])  # type: ignore[arg-type]


def test_property_lookup() -> None:
    """プロパティはコンテキストから読み、存在しなければ None。"""
    assert evaluate({"Property": "plan"}, plan="basic") == "basic"
    assert evaluate({"Property": "missing"}) is None
    assert evaluate({"Property": {"Property": "key"}}, key="plan", plan="pro") == "pro"


def test_all_and_any() -> None:
    """All と Any は truthy 判定を使う。"""
    assert evaluate({"All": [True, 1, "x"]}) is True
    assert evaluate({"All": [True, 0]}) is False
    assert evaluate({"All": []}) is True
    assert evaluate({"Any": [False, "", 1]}) is True
    assert evaluate({"Any": [False, None]}) is False
    assert evaluate({"Any": []}) is False


def test_all_short_circuits() -> None:
    """All は最初の falsy な引数で評価を打ち切る。"""
    counter = CountingExpression(True)
    assert All(False, counter).evaluate(EvaluationContext()) is False
    assert counter.calls == 0
    assert All(True, counter).evaluate(EvaluationContext()) is True
    assert counter.calls == 1


def test_any_short_circuits() -> None:
    """Any は最初の truthy な引数で評価を打ち切る。"""
    counter = CountingExpression(False)
    assert AnyExpression(True, counter).evaluate(EvaluationContext()) is True
    assert counter.calls == 0


def test_conversions() -> None:
    """Boolean、Number、String の変換。"""
    assert evaluate({"Boolean": "false"}) is True
    assert evaluate({"Boolean": 0}) is False
    assert evaluate({"Number": "21"}) == 21
    assert evaluate({"Number": "abc"}) == 0
    assert evaluate({"Number": True}) == 1
    assert evaluate({"String": 42}) == "42"
    assert evaluate({"String": True}) == "true"
    assert evaluate({"String": None}) == ""


def test_equal_is_strict() -> None:
    """Equal は型と値を比較する。"""
    assert evaluate({"Equal": [1, 1]}) is True
    assert evaluate({"Equal": ["1", 1]}) is False
    assert evaluate({"Equal": [{"Property": "plan"}, "pro"]}, plan="pro") is True
    assert evaluate({"NotEqual": ["a", "b"]}) is True
    assert evaluate({"NotEqual": ["a", "a"]}) is False


def test_equal_null_is_false() -> None:
    """欠損値同士は等しくない。"""
    assert Equal(None, None).evaluate(EvaluationContext()) is False
    assert NotEqual(None, None).evaluate(EvaluationContext()) is False
    assert evaluate({"Equal": [{"Property": "a"}, {"Property": "b"}]}) is False


def test_ordering_requires_numbers() -> None:
    """数値でないオペランドの大小比較は False。"""
    context = EvaluationContext()
    assert GreaterThan(2, 1).evaluate(context) is True
    assert GreaterThan(1, 1).evaluate(context) is False
    assert GreaterThanOrEqualTo(1, 1).evaluate(context) is True
    assert LessThan(1, 2).evaluate(context) is True
    assert LessThanOrEqualTo(2, 2).evaluate(context) is True
    assert GreaterThan("2", 1).evaluate(context) is False
    assert LessThan(None, 1).evaluate(context) is False


def test_ordering_with_properties() -> None:
    """アクタープロパティに対する典型的な年齢判定。"""
    literal = {"GreaterThanOrEqualTo": [{"Property": "age"}, 18]}
    assert evaluate(literal, age=21) is True
    assert evaluate(literal, age=16) is False
    assert evaluate(literal) is False


def test_duration_units() -> None:
    """Duration は秒に変換される。"""
    assert Duration(90, "minutes").evaluate(EvaluationContext()) == 5400
    assert evaluate({"Duration": [2, "Days"]}) == 172800
    assert evaluate({"Duration": [1, "year"]}) == 31556952
    assert evaluate({"Duration": 30}) == 30


def test_duration_unknown_unit() -> None:
    """未知の単位はエラーになり、有効な単位を列挙する。"""
    with pytest.raises(FlipperError) as exc_info:
        Duration(5, "fortnights").evaluate(EvaluationContext())
    assert exc_info.value.code == FlipperErrorCodes.INVALID_DURATION
    assert "minute" in str(exc_info.value)


def test_duration_non_numeric_scalar() -> None:
    """数値でないスカラーはエラーになる。"""
    with pytest.raises(FlipperError) as exc_info:
        evaluate({"Duration": ["soon", "minutes"]})
    assert exc_info.value.code == FlipperErrorCodes.INVALID_DURATION


def test_time_parsing() -> None:
    """日付文字列とミリ秒値は Unix 秒になる。"""
    assert evaluate({"Time": "2024-01-01T00:00:00Z"}) == 1704067200
    assert evaluate({"Time": "2024-01-01T00:00:00"}) == 1704067200
    assert evaluate({"Time": "Mon, 01 Jan 2024 00:00:00 GMT"}) == 1704067200
    assert evaluate({"Time": 1704067200000}) == 1704067200
    assert evaluate({"Time": "1704067200000"}) == 1704067200


def test_time_invalid_is_nan() -> None:
    """解析できない入力はエラーではなく NaN。"""
    assert math.isnan(evaluate({"Time": "not a date"}))
    assert math.isnan(evaluate({"Time": None}))


def test_time_out_of_range_is_nan() -> None:
    """float に収まらないミリ秒値は NaN。"""
    assert math.isnan(evaluate({"Time": "9" * 400}))
    assert math.isnan(evaluate({"Time": "9" * 5000}))
    assert math.isnan(Time(Constant(10**400)).evaluate(EvaluationContext()))


def test_now_is_current_time() -> None:
    """Now は現在の Unix 秒を返す。"""
    before = math.floor(time.time())
    value = Now().evaluate(EvaluationContext())
    assert before <= value <= math.floor(time.time())


def test_now_compared_with_time() -> None:
    """過去のリリース日は現在時刻より小さい。"""
    literal = {"GreaterThanOrEqualTo": [{"Now": []}, {"Time": "2020-01-01T00:00:00Z"}]}
    assert evaluate(literal) is True


def test_random_range(mocker) -> None:
    """Random は最大値未満に収まる。"""
    mocker.patch("k1s0_flipper.expressions.rollout.random.random", return_value=0.999)
    assert Random(10).evaluate(EvaluationContext()) == 9
    assert Random(1).evaluate(EvaluationContext()) == 0
    assert Random("x").evaluate(EvaluationContext()) == 0


def test_percentage() -> None:
    """Percentage は厳密な小なり比較。"""
    assert evaluate({"Percentage": [10, 25]}) is True
    assert evaluate({"Percentage": [25, 25]}) is False
    assert Percentage("5", "10").evaluate(EvaluationContext()) is True


@pytest.mark.parametrize(
    "literal",
    [
        True,
        "text",
        {"Property": "plan"},
        {"All": []},
        {"Any": [{"Equal": [{"Property": "plan"}, "pro"]}, {"Boolean": 1}]},
        {"Duration": [90, "minutes"]},
        {"Time": "2024-01-01T00:00:00Z"},
        {"Now": []},
        {"PercentageOfActors": [{"Property": "id"}, 25]},
        {"LessThan": [{"Random": 100}, 50]},
        {"LessThanOrEqualTo": [{"Property": "age"}, 65]},
        {"GreaterThan": [{"Property": "age"}, 18]},
        {"GreaterThanOrEqualTo": [{"Now": []}, {"Time": "2024-01-01T00:00:00Z"}]},
        {"NotEqual": [{"Property": "plan"}, "free"]},
        {"Percentage": [{"Random": 100}, 25]},
        {"String": {"Number": "3"}},
    ],
)
def test_value_round_trip(literal: Any) -> None:
    """value() から同じツリーを再構築できる。"""
    expression = build_expression(literal)
    assert expression.value() == literal
    assert build_expression(expression.value()).equals(expression)


def test_constant_round_trip() -> None:
    """明示的な Constant 表記は素のリテラルとして読み戻される。"""
    expression = build_expression({"Constant": 1})
    assert expression.value() == 1
    assert build_expression(expression.value()).equals(expression)
    assert build_expression({"Constant": None}).value() is None


def test_structural_equality() -> None:
    """ツリーは同一性ではなく構造で比較する。"""
    assert Equal(Property("a"), 1) == Equal(Property("a"), 1)
    assert Equal(Property("a"), 1) != Equal(Property("a"), 2)
    assert Constant(1) != Constant(True)


def test_registry_extend() -> None:
    """拡張したレジストリだけがカスタムノードを知っている。"""

    class Always(Expression):
        name = "Always"

        def evaluate(self, context: EvaluationContext) -> bool:
            return True

    registry = DEFAULT_REGISTRY.extend(Always)
    assert "Always" in registry
    assert "Always" not in DEFAULT_REGISTRY
    assert build_expression({"All": [{"Always": []}]}, registry).evaluate(EvaluationContext()) is True
    with pytest.raises(FlipperError):
        build_expression({"Always": []})


def test_default_registry_contents() -> None:
    """デフォルトのレジストリは 19 個の組み込みノードを持つ。"""
    assert len(DEFAULT_REGISTRY) == 19
    assert DEFAULT_REGISTRY["Any"] is AnyExpression
