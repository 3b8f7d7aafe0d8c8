"""
Step 3: Variant Generation
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from tqdm import tqdm

from varevo.engine.generator import ErrorPolicy, GenerationOptions, VariantGenerator
from varevo.engine.ground_truth import write_ground_truth
from varevo.engine.sampling import Sampler, sampler_from_config
from varevo.errors import CheckoutError, DataIntegrityError, VarevoError
from varevo.history.checkout import GitCheckout
from varevo.history.dataset import VariabilityCommit, VariabilityDataset
from varevo.io.file_ops import write_jsonl
from varevo.io.kernelhaven import VariantPresenceConditionIO
from varevo.pipeline.base_step import BaseStep
from varevo.pipeline.helpers import commit_chains, get_repo_commit, load_history
from varevo.schemas.annotations import AnnotationNode
from varevo.schemas.base import sha256_text
from varevo.schemas.variants import Variant
from varevo.variability.tree import check_well_formed, features_of_tree


class VariantGenerationStep(BaseStep):
    """Replay the sequenced history and generate the sampled variants of every commit."""

    @property
    def name(self) -> str:
        return "variant_generation"

    @property
    def display_name(self) -> str:
        return "Step 3: Generating Variants"

    def should_skip(self) -> tuple[bool, str]:
        if self.args.skip_generation:
            return True, "skip_generation"
        return False, ""

    def execute(self) -> dict:
        """Execute variant generation."""
        dataset = VariabilityDataset.load(self.config.dataset_path)
        history = load_history(self.paths["history_json"], dataset, self.config.get("history.strategy"))
        chains = commit_chains(history, dataset)

        commits = [commit for chain in chains for commit in chain]
        if self.args.max_commits is not None:
            commits = commits[:self.args.max_commits]

        spl_repo = Path(self.config.spl_repo_path)
        use_git = self.config.get("generation.checkout", True)
        checkout = GitCheckout(spl_repo, clean=self.config.get("generation.clean_checkout", False))
        original_head = get_repo_commit(spl_repo) if use_git else None

        sampler = sampler_from_config(self.config.get("sampling", {}))
        options = GenerationOptions.from_config(self.config.get("generation", {}))
        generator = VariantGenerator()

        self.logger.info(f"Commits to process: {len(commits)} in {len(chains)} chains")
        self.logger.info(f"Error policy: {options.error_policy.value}, workers: {self.config.max_workers}")

        rows: list[dict] = []
        failed_commits: list[dict] = []
        try:
            for commit in tqdm(commits, desc="Generating variants"):
                if commit.id not in dataset:
                    failed_commits.append({"commit": commit.id, "error": "not in dataset"})
                    continue
                variability_commit = dataset.get(commit.id)
                try:
                    spl_root = checkout.checkout(commit) if use_git else spl_repo
                    rows.extend(self._generate_commit(variability_commit, spl_root, sampler, generator, options))
                except (CheckoutError, DataIntegrityError, OSError) as e:
                    self.logger.error(f"Commit {commit.id} failed: {e}")
                    if options.error_policy is ErrorPolicy.ABORT:
                        raise
                    failed_commits.append({"commit": commit.id, "error": str(e)})
        finally:
            if original_head:
                try:
                    checkout.checkout_id(original_head)
                except CheckoutError as e:
                    self.logger.warning(f"Could not restore {spl_repo} to {original_head[:8]}: {e}")

        write_jsonl(self.paths["generation_report_jsonl"], rows)

        failed_variants = [row for row in rows if row["status"] == "failed"]
        self.logger.info(
            f"Generated {len(rows) - len(failed_variants)} variants, "
            f"{len(failed_variants)} failed, {len(failed_commits)} commits failed"
        )
        return {
            "status": "success",
            "commits": len(commits),
            "variants_generated": len(rows) - len(failed_variants),
            "variants_failed": len(failed_variants),
            "failed_commits": failed_commits,
        }

    def _generate_commit(
        self,
        variability_commit: VariabilityCommit,
        spl_root: Path,
        sampler: Sampler,
        generator: VariantGenerator,
        options: GenerationOptions,
    ) -> list[dict]:
        """Generate every sampled variant of one checked out commit."""
        lazy_tree = variability_commit.presence_conditions
        if lazy_tree is None:
            raise DataIntegrityError(f"No presence conditions for commit {variability_commit.id}")

        try:
            tree = lazy_tree.get()
            check_well_formed(tree)
            variants = sampler.sample(features_of_tree(tree))
            commit_dir = Path(self.paths["variants"]) / variability_commit.id

            max_workers = int(self.config.max_workers or 1)
            rows = []
            if max_workers > 1 and len(variants) > 1:
                with ThreadPoolExecutor(max_workers=max_workers) as executor:
                    futures = [
                        executor.submit(self._generate_variant, generator, tree, spl_root, commit_dir, variant, options)
                        for variant in variants
                    ]
                    for future in as_completed(futures):
                        rows.append(future.result())
            else:
                for variant in variants:
                    rows.append(self._generate_variant(generator, tree, spl_root, commit_dir, variant, options))
        finally:
            lazy_tree.forget()

        for row in rows:
            row["commit"] = variability_commit.id
        return sorted(rows, key=lambda row: row["variant"])

    def _generate_variant(
        self,
        generator: VariantGenerator,
        tree: AnnotationNode,
        spl_root: Path,
        commit_dir: Path,
        variant: Variant,
        options: GenerationOptions,
    ) -> dict:
        variant_dir = commit_dir / variant.name
        try:
            ground_truth = generator.generate(tree, spl_root, variant_dir, variant, options)
            write_ground_truth(ground_truth, variant, variant_dir)
        except (VarevoError, OSError) as e:
            self.logger.error(f"Variant {variant.name} failed: {e}")
            if options.error_policy is ErrorPolicy.ABORT:
                raise
            return {"variant": variant.name, "status": "failed", "error": str(e)}

        return {
            "variant": variant.name,
            "status": "success",
            "files": len(ground_truth.files),
            "skipped_files": [skipped.path for skipped in ground_truth.skipped_files],
            "lines": sum(truth.line_count for truth in ground_truth.files.values()),
            "presence_conditions_sha256": sha256_text(VariantPresenceConditionIO().render(ground_truth.variant)),
        }
