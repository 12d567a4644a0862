from jobbuilder.artifacts import has_clone_source, reconcile
from jobbuilder.model import CLONE_SOURCE_PLACEHOLDER, Artifact


class TestReconcile:
    def test_empty_list_gets_clone_source(self):
        assert reconcile([]) == [Artifact(source=CLONE_SOURCE_PLACEHOLDER)]

    def test_clone_source_prepended_before_user_artifacts(self):
        user = [
            Artifact(source="https://example.com/tool.zip", destination="local/tool"),
            Artifact(source="git::https://example.com/repo.git", options={"ref": "main"}),
        ]

        result = reconcile(user)

        assert len(result) == len(user) + 1
        assert result[0] == Artifact(source=CLONE_SOURCE_PLACEHOLDER)
        assert result[1:] == user

    def test_user_clone_source_left_untouched(self):
        user = [
            Artifact(source="https://example.com/tool.zip"),
            Artifact(source=CLONE_SOURCE_PLACEHOLDER, destination="local/src", options={"archive": "false"}),
        ]

        assert reconcile(user) == user

    def test_does_not_mutate_input(self):
        user = [Artifact(source="https://example.com/tool.zip")]
        reconcile(user)
        assert user == [Artifact(source="https://example.com/tool.zip")]

    def test_idempotent(self):
        inputs = [
            [],
            [Artifact(source="a")],
            [Artifact(source="a"), Artifact(source=CLONE_SOURCE_PLACEHOLDER, destination="x")],
        ]
        for artifacts in inputs:
            once = reconcile(artifacts)
            assert reconcile(once) == once

    def test_match_is_exact(self):
        near_miss = Artifact(source=CLONE_SOURCE_PLACEHOLDER + "/")
        assert not has_clone_source([near_miss])
        assert reconcile([near_miss])[0].source == CLONE_SOURCE_PLACEHOLDER
