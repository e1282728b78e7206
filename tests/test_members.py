"""
Tests for the member rewrite table.
"""

from textwrap import dedent

from undecorator.codemod.diagnostics import DiagnosticCategory
from undecorator.codemod.pipeline import TransformStatus, transform_source


def code(text):
    return dedent(text).lstrip("\n")


class TestActionRewrites:
    """Tests for `action` decorators."""

    def test_action_fields(self, transform):
        """Test bound and unbound action fields."""
        result = transform(
            """
            import { action } from "mobx"

            class A {
                @action.bound handler = function () {
                    return this
                }
                @action.bound arrow = () => 1
                @action named = () => 2
                @action("label") labelled = () => 3
            }
            """
        )
        assert result.status == TransformStatus.MODIFIED
        assert result.output == code(
            """
            import { action } from "mobx"

            class A {
                handler = action.bound(function () {
                    return this
                })
                arrow = action(() => 1)
                named = action(() => 2)
                labelled = action("label", () => 3)
            }
            """
        )

    def test_bound_methods_become_fields(self, transform):
        """Test that bound methods are replaced by fields keeping comments and modifiers."""
        result = transform(
            """
            import { action } from "mobx"

            class A {
                // resets state
                @action.bound
                public reset(): void {
                    this.x = 0
                }
                @action.bound *steps() {
                    yield 1
                }
            }
            """
        )
        assert result.output == code(
            """
            import { action } from "mobx"

            class A {
                // resets state
                public reset = action((): void => {
                    this.x = 0
                })
                steps = action.bound(function*() {
                    yield 1
                })
            }
            """
        )

    def test_plain_action_methods_use_prototype(self, transform):
        """Test that plain action methods are wrapped on the prototype after the class."""
        result = transform(
            """
            import { action } from "mobx";

            export class Store {
                @action("save it")
                save() {
                    return 1;
                }
                @action "quoted-name"() {}
            }
            """
        )
        assert result.output == code(
            """
            import { action } from "mobx";

            export class Store {
                save() {
                    return 1;
                }
                "quoted-name"() {}
            }
            Store.prototype.save = action("save it", Store.prototype.save);
            Store.prototype["quoted-name"] = action(Store.prototype["quoted-name"]);
            """
        )

    def test_class_expression_action_method_is_skipped(self, transform):
        """Test that action methods of class expressions are left untouched."""
        result = transform(
            """
            import { action } from "mobx"

            const Store = class {
                @action save() {}
            }
            """
        )
        assert result.status == TransformStatus.UNCHANGED
        assert result.output is None
        assert [d.category for d in result.diagnostics] == [DiagnosticCategory.UNSUPPORTED_CONTEXT]

    def test_private_action_method_is_skipped(self, transform):
        """Test that private names cannot be reached through the prototype."""
        result = transform(
            """
            import { action } from "mobx"

            class Store {
                @action #save() {}
            }
            """
        )
        assert result.status == TransformStatus.UNCHANGED
        assert len(result.diagnostics) == 1


class TestObservableRewrites:
    """Tests for `observable` decorators."""

    def test_aliased_observable_fields(self, transform):
        """Test that values are wrapped with the alias and modifiers are kept."""
        result = transform(
            """
            import { observable as obs } from "mobx"

            class A {
                @obs.shallow list: string[] = []
                @obs count: number
            }
            """
        )
        assert result.output == code(
            """
            import { observable as obs, initializeObservables } from "mobx"

            class A {
                list: string[] = obs.shallow([])
                count: number = obs()
                constructor() {
                    initializeObservables(this)
                }
            }
            """
        )


class TestComputedRewrites:
    """Tests for `computed` decorators."""

    def test_getter_and_setter_fold_into_field(self, transform):
        """Test that getters become computed fields and setters are folded in."""
        result = transform(
            """
            import { computed } from "mobx"

            class A {
                @computed get double() {
                    return this.value * 2
                }
                set double(v) {
                    this.value = v / 2
                }
                @computed.struct get pair() {
                    return [1, 2]
                }
            }
            """
        )
        assert result.output == code(
            """
            import { computed, initializeObservables } from "mobx"

            class A {
                double = computed(() => {
                    return this.value * 2
                }, (v) => {
                    this.value = v / 2
                })
                pair = computed.struct(() => {
                    return [1, 2]
                })
                constructor() {
                    initializeObservables(this)
                }
            }
            """
        )


class TestUnknownCases:
    """Tests for decorator and member combinations without a rewrite."""

    def test_unknown_combinations_are_reported(self, transform):
        """Test that unsupported combinations keep the member unchanged."""
        result = transform(
            """
            import { observable, computed } from "mobx"

            class A {
                @observable get x() {
                    return 1
                }
                @computed y = 1
            }
            """
        )
        assert result.status == TransformStatus.UNCHANGED
        assert [d.message for d in result.diagnostics] == [
            "Unknown case for undecorate observable",
            "Unknown case for undecorate computed",
        ]
        assert all(d.category == DiagnosticCategory.UNKNOWN_CASE for d in result.diagnostics)


class TestTrailingComments:
    """Tests for comments that follow a rewritten member on the same line."""

    def test_bound_method_comment_moves_behind_field(self, transform):
        result = transform(
            """
            import { action } from "mobx"

            class A {
                @action.bound m() {} // note
            }
            """
        )
        assert result.output == code(
            """
            import { action } from "mobx"

            class A {
                m = action(() => {}) // note
            }
            """
        )
        assert transform_source("store.ts", result.output).status == TransformStatus.UNCHANGED

    def test_computed_getter_comment(self, transform):
        result = transform(
            """
            import { computed } from "mobx"

            class A {
                @computed get v() {
                    return 1
                } // note
            }
            """
        )
        assert result.output == code(
            """
            import { computed, initializeObservables } from "mobx"

            class A {
                v = computed(() => {
                    return 1
                }) // note
                constructor() {
                    initializeObservables(this)
                }
            }
            """
        )
        assert transform_source("store.ts", result.output).status == TransformStatus.UNCHANGED

    def test_setter_comment_moves_with_removed_setter(self, transform):
        result = transform(
            """
            import { computed } from "mobx"

            class A {
                @computed get v() {
                    return this._v
                }
                set v(x) {
                    this._v = x
                } // setter
            }
            """
        )
        assert result.output == code(
            """
            import { computed, initializeObservables } from "mobx"

            class A {
                v = computed(() => {
                    return this._v
                }, (x) => {
                    this._v = x
                }) // setter
                constructor() {
                    initializeObservables(this)
                }
            }
            """
        )
        assert transform_source("store.ts", result.output).status == TransformStatus.UNCHANGED

    def test_action_field_value_comment(self, transform):
        result = transform(
            """
            import { action } from "mobx"

            class A {
                @action.bound f = function () {} // note
            }
            """
        )
        assert "f = action.bound(function () {}) // note" in result.output
        assert transform_source("store.ts", result.output).status == TransformStatus.UNCHANGED


class TestStatementContinuation:
    """Tests for generated fields in files without semicolons."""

    def test_field_before_computed_key_gets_semicolon(self, transform):
        result = transform(
            """
            import { action } from "mobx"

            class A {
                @action.bound m() {}
                [Symbol.iterator]() {}
            }
            """
        )
        assert result.output == code(
            """
            import { action } from "mobx"

            class A {
                m = action(() => {});
                [Symbol.iterator]() {}
            }
            """
        )
        assert transform_source("store.ts", result.output).status == TransformStatus.UNCHANGED

    def test_synthesized_field_before_generator(self, transform):
        result = transform(
            """
            import { decorate, observable } from "mobx"

            class A {
                *items() {}
                constructor() {
                    this.b = 1
                }
            }
            decorate(A, { b: observable })
            """
        )
        assert "    b = observable();\n    *items() {}" in result.output
        assert transform_source("store.ts", result.output).status != TransformStatus.FAILED

    def test_plain_following_member_keeps_style(self, transform):
        result = transform(
            """
            import { action } from "mobx"

            class A {
                @action.bound m() {}
                other() {}
            }
            """
        )
        assert "    m = action(() => {})\n    other() {}" in result.output
