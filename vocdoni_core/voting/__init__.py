from .cipher import decrypt_raw, encrypt_raw, package_vote, unpack_vote
from .envelope import assemble_anonymous, assemble_signed
from .estimation import estimate_block_at_datetime, estimate_date_at_block
from .models import (
    BlockStatus,
    PackagedVote,
    ProcessKey,
    SingleChoiceResults,
    SingleQuestionResults,
    VoteEnvelope,
    VotePackage,
)
from .nullifier import get_anonymous_vote_nullifier, get_signed_vote_nullifier
from .process import get_process_id, get_snark_process_id
from .results import digest_single_choice_results, digest_single_question_results
from .zk import ZkInputs, build_zk_inputs, digest_vote_package

__all__ = [
    "BlockStatus",
    "PackagedVote",
    "ProcessKey",
    "VoteEnvelope",
    "VotePackage",
    "ZkInputs",
    "encrypt_raw",
    "decrypt_raw",
    "package_vote",
    "unpack_vote",
    "assemble_signed",
    "assemble_anonymous",
    "estimate_block_at_datetime",
    "estimate_date_at_block",
    "get_signed_vote_nullifier",
    "get_anonymous_vote_nullifier",
    "get_process_id",
    "get_snark_process_id",
    "build_zk_inputs",
    "digest_vote_package",
    "SingleChoiceResults",
    "SingleQuestionResults",
    "digest_single_choice_results",
    "digest_single_question_results",
]
