from __future__ import annotations

import pytest

from backend.apps.search.dto import ScopeDirective
from backend.apps.search.policy import ScopePolicy
from backend.apps.search.tokenizer import candidate, classify, parse_directive

UNRESTRICTED = ScopePolicy.unrestricted()


def responds(*names):
    return lambda name: name in names


@pytest.mark.parametrize("query", [None, "", "   ", "\t\n  "])
def test_blank_query_yields_nothing(query):
    assert classify(query, UNRESTRICTED, responds("active")) == ((), ())


def test_plain_words_keep_their_order():
    words, directives = classify("  foo   bar\tbaz ", UNRESTRICTED, responds("foo"))
    assert words == ("foo", "bar", "baz")
    assert directives == ()


def test_mixed_query_groups_words_and_scopes():
    words, directives = classify(
        "foobar scope:active scope:subscribed", UNRESTRICTED, responds("active", "subscribed")
    )
    assert words == ("foobar",)
    assert [d.name for d in directives] == ["active", "subscribed"]


def test_interleaved_tokens_keep_relative_order_per_list():
    words, directives = classify(
        "scope:subscribed lua scope:active dan", UNRESTRICTED, responds("active", "subscribed")
    )
    assert words == ("lua", "dan")
    assert [d.name for d in directives] == ["subscribed", "active"]


def test_scope_prefix_is_case_insensitive():
    _, directives = classify("ScoPE:active", UNRESTRICTED, responds("active"))
    assert directives == (ScopeDirective(user_input="active", name="active", argument=None),)


def test_scope_prefix_with_argument():
    directive = parse_directive("scope", "with_argument(3)")
    assert directive.name == "with_argument"
    assert directive.argument == "3"
    assert directive.user_input == "with_argument(3)"


def test_scope_prefix_without_call_syntax_keeps_text_as_name():
    directive = parse_directive("scope", "bang!")
    assert directive == ScopeDirective(user_input="bang!", name="bang!", argument=None)


def test_wildcard_form():
    directive = parse_directive("kind", "gold")
    assert directive == ScopeDirective(user_input="kind:gold", name="kind", argument="gold")


def test_unrestricted_policy_applies_wildcard_form():
    words, directives = classify("kind:gold", UNRESTRICTED, responds("kind"))
    assert words == ()
    assert directives == (ScopeDirective(user_input="kind:gold", name="kind", argument="gold"),)


def test_colons_after_the_first_belong_to_the_argument():
    directive = candidate("kind:a:b")
    assert directive.name == "kind"
    assert directive.argument == "a:b"


def test_candidate_is_found_inside_the_token():
    # the word run right before the colon is the left part
    assert candidate("x-kind:gold") == ScopeDirective(
        user_input="kind:gold", name="kind", argument="gold"
    )


@pytest.mark.parametrize("token", ["scope:", "bar@baz.com", "plain", ":active", "тест:foo"])
def test_tokens_without_scope_grammar(token):
    assert candidate(token) is None


def test_missing_capability_keeps_token_as_word():
    words, directives = classify("scope:active", UNRESTRICTED, responds())
    assert words == ("scope:active",)
    assert directives == ()


def test_unauthorized_scope_keeps_token_as_word():
    words, directives = classify(
        "scope:closed", ScopePolicy.allow("active"), responds("active", "closed")
    )
    assert words == ("scope:closed",)
    assert directives == ()


def test_token_is_never_in_both_lists():
    query = "a scope:active scope:closed kind:gold b"
    words, directives = classify(query, ScopePolicy.allow("active"), responds("active", "closed", "kind"))
    assert words == ("a", "scope:closed", "kind:gold", "b")
    assert [d.user_input for d in directives] == ["active"]


def test_max_tokens_stops_scope_parsing_but_keeps_tokens():
    words, directives = classify(
        "scope:active scope:subscribed", UNRESTRICTED, responds("active", "subscribed"), max_tokens=1
    )
    assert [d.name for d in directives] == ["active"]
    assert words == ("scope:subscribed",)


def test_reclassifying_keywords_is_stable():
    policy = ScopePolicy.allow("active")
    check = responds("active", "closed")
    words, _ = classify("Foo scope:closed scope:active bar", policy, check)
    again, directives = classify(" ".join(words), policy, check)
    assert again == words
    assert directives == ()
