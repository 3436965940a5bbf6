"""Drive one edit transaction from binaries to commit.

Steps run strictly in order and each needs the previous one to succeed:

    1. validate options, resolve binaries, read the package name
    2. authenticate
    3. open an edit
    4. upload every binary                  (concurrent, joined)
    5. point the track at the version codes
    6. attach one changelog to every version code (optional)
    7. attach per-language metadata        (optional; images concurrent, joined)
    8. commit

The first failure aborts the run. Nothing is rolled back: an uncommitted
edit is never visible and expires on the store side.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, replace

from gplay.core.result import Err, Ok, Result
from gplay.output.console import ConsoleProtocol
from gplay.publish.binaries import PackageReader, resolve_binaries, sha256_file
from gplay.publish.changelogs import read_changelog
from gplay.publish.client import ClientConnector, EditClient
from gplay.publish.contracts import PublishConfig, PublishReport
from gplay.publish.errors import (
    BinaryUploadFailed,
    ChangelogUploadFailed,
    CommitFailed,
    EditOpenFailed,
    InvalidPublishConfig,
    MetadataUploadFailed,
    PublishError,
    TrackUpdateFailed,
)
from gplay.publish.images import group_by_type
from gplay.publish.metadata import list_language_dirs, resolve_language
from gplay.publish.model import (
    BinaryArtifact,
    BinaryFile,
    ChangelogEntry,
    Edit,
    EditRef,
    ImageAsset,
    ImageType,
    LanguageMetadata,
    PublishState,
    ReleaseTrack,
)


@dataclass(frozen=True, slots=True)
class TransactionContext:
    """State of one run. Each step returns a new context instead of mutating it."""

    package_name: str
    state: PublishState = PublishState.IDLE
    edit: Edit | None = None
    artifacts: tuple[BinaryArtifact, ...] = ()
    languages: tuple[str, ...] = ()

    @property
    def edit_ref(self) -> EditRef:
        if self.edit is None:
            raise RuntimeError(f"no open edit in state {self.state}")
        return EditRef(package_name=self.package_name, edit_id=self.edit.id)

    @property
    def version_codes(self) -> tuple[int, ...]:
        """Version codes of this run, upload order, without duplicates."""
        return tuple(dict.fromkeys(a.version_code for a in self.artifacts))


type StepResult = Result[TransactionContext, PublishError]


class Publisher:
    """Runs publish transactions against the store.

    Args:
        connector: Authenticates and returns the edit client (step 2).
        package_reader: Extracts the package name from the primary binary.
        console: Progress and diagnostics output.
    """

    def __init__(
        self,
        *,
        connector: ClientConnector,
        package_reader: PackageReader,
        console: ConsoleProtocol,
    ) -> None:
        self.connector = connector
        self.package_reader = package_reader
        self.console = console

    def _transition(
        self, ctx: TransactionContext, state: PublishState, **changes: object
    ) -> TransactionContext:
        self.console.debug(f"state: {ctx.state} -> {state}")
        return replace(ctx, state=state, **changes)

    def _abort[T](
        self, state: PublishState, result: Err[PublishError]
    ) -> Result[T, PublishError]:
        self.console.debug(
            f"state: {state} -> {PublishState.ABORTED} ({type(result.error).__name__})"
        )
        return result

    def publish(self, config: PublishConfig) -> Result[PublishReport, PublishError]:
        checked = config.validate()
        if isinstance(checked, Err):
            return self._abort(
                PublishState.IDLE, Err(InvalidPublishConfig(reason=checked.error.message))
            )

        binaries = resolve_binaries(config.binary, config.additional_binaries)
        if isinstance(binaries, Err):
            return self._abort(PublishState.IDLE, binaries)
        if len(binaries.value) > 1:
            self.console.info(f"found {len(binaries.value)} binaries")
        for binary in binaries.value:
            self.console.debug(f"binary: {binary.path} ({binary.kind})")

        package = self.package_reader.read_package_name(binaries.value[0])
        if isinstance(package, Err):
            return self._abort(PublishState.IDLE, package)
        self.console.debug(f"package name: {package.value}")

        connected = self.connector.connect()
        if isinstance(connected, Err):
            return self._abort(PublishState.IDLE, connected)
        client = connected.value

        ctx = TransactionContext(package_name=package.value)
        result = self._run(client, ctx, config, binaries.value)
        if isinstance(result, Err):
            return result

        ctx = result.value
        return Ok(
            PublishReport(
                package_name=ctx.package_name,
                edit_id=ctx.edit_ref.edit_id,
                track=config.track,
                artifacts=ctx.artifacts,
                languages=ctx.languages,
                state=ctx.state,
            )
        )

    def _run(
        self,
        client: EditClient,
        ctx: TransactionContext,
        config: PublishConfig,
        binaries: tuple[BinaryFile, ...],
    ) -> StepResult:
        steps: list[Callable[[TransactionContext], StepResult]] = [
            lambda c: self._open_edit(client, c),
            lambda c: self._upload_binaries(client, c, binaries, config.max_workers),
            lambda c: self._update_track(client, c, config),
            lambda c: self._attach_changelog(client, c, config),
            lambda c: self._attach_metadata(client, c, config),
            lambda c: self._commit(client, c),
        ]
        for step in steps:
            result = step(ctx)
            if isinstance(result, Err):
                return self._abort(ctx.state, result)
            ctx = result.value
        return Ok(ctx)

    def _open_edit(self, client: EditClient, ctx: TransactionContext) -> StepResult:
        self.console.print(f"Opening edit for {ctx.package_name}")
        result = client.open_edit(ctx.package_name)
        if isinstance(result, Err):
            return Err(EditOpenFailed(package_name=ctx.package_name, reason=str(result.error)))
        edit = result.value
        self.console.debug(f"edit {edit.id} expires in {edit.expiry_seconds}s")
        return Ok(self._transition(ctx, PublishState.EDIT_OPEN, edit=edit))

    def _upload_binaries(
        self,
        client: EditClient,
        ctx: TransactionContext,
        binaries: tuple[BinaryFile, ...],
        max_workers: int,
    ) -> StepResult:
        edit = ctx.edit_ref

        def upload(binary: BinaryFile) -> Result[BinaryArtifact, BinaryUploadFailed]:
            self.console.print(f"Uploading {binary.path}")
            try:
                content_hash = sha256_file(binary.path)
            except OSError as e:
                return Err(BinaryUploadFailed(path=binary.path, reason=str(e)))
            result = client.upload_binary(edit, binary)
            if isinstance(result, Err):
                return Err(BinaryUploadFailed(path=binary.path, reason=str(result.error)))
            self.console.debug(f"uploaded {binary.path} as version code {result.value}")
            return Ok(
                BinaryArtifact(
                    path=binary.path, version_code=result.value, content_hash=content_hash
                )
            )

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(upload, binary) for binary in binaries]
            wait(futures)

        # Every upload has finished here; read results in submission order.
        artifacts: list[BinaryArtifact] = []
        for future in futures:
            result = future.result()
            if isinstance(result, Err):
                return result
            artifacts.append(result.value)

        return Ok(
            self._transition(ctx, PublishState.BINARIES_UPLOADED, artifacts=tuple(artifacts))
        )

    def _update_track(
        self, client: EditClient, ctx: TransactionContext, config: PublishConfig
    ) -> StepResult:
        track = ReleaseTrack.for_release(config.track, ctx.version_codes, config.user_fraction)
        codes = ", ".join(str(c) for c in track.version_codes)
        self.console.print(f"Updating track {track.name} with version codes [{codes}]")
        result = client.update_track(ctx.edit_ref, track)
        if isinstance(result, Err):
            return Err(TrackUpdateFailed(track=track.name, reason=str(result.error)))
        return Ok(self._transition(ctx, PublishState.TRACK_UPDATED))

    def _attach_changelog(
        self, client: EditClient, ctx: TransactionContext, config: PublishConfig
    ) -> StepResult:
        path = config.changelog_path
        if path is None:
            return Ok(ctx)

        language = config.changelog_language
        text = read_changelog(path)
        if isinstance(text, Err):
            return Err(
                ChangelogUploadFailed(language_code=language, reason=text.error.message, path=path)
            )

        for version_code in ctx.version_codes:
            self.console.print(f"Attaching changelog {path} to version code {version_code}")
            entry = ChangelogEntry(
                language_code=language, version_code=version_code, text=text.value, path=path
            )
            result = client.update_changelog(ctx.edit_ref, entry)
            if isinstance(result, Err):
                return Err(
                    ChangelogUploadFailed(
                        language_code=language,
                        version_code=version_code,
                        reason=str(result.error),
                    )
                )
        return Ok(ctx)

    def _attach_metadata(
        self, client: EditClient, ctx: TransactionContext, config: PublishConfig
    ) -> StepResult:
        root = config.metadata_root
        if root is None:
            return Ok(self._transition(ctx, PublishState.METADATA_ATTACHED))

        self.console.print(f"Attaching metadata from {root}")
        languages = list_language_dirs(root)
        if isinstance(languages, Err):
            return languages

        attached: list[str] = []
        for language_code, directory in languages.value:
            resolved = resolve_language(language_code, directory, ctx.version_codes)
            if isinstance(resolved, Err):
                return resolved
            sent = self._upload_language(client, ctx.edit_ref, resolved.value, config.max_workers)
            if isinstance(sent, Err):
                return sent
            attached.append(language_code)

        return Ok(
            self._transition(ctx, PublishState.METADATA_ATTACHED, languages=tuple(attached))
        )

    def _upload_language(
        self,
        client: EditClient,
        edit: EditRef,
        metadata: LanguageMetadata,
        max_workers: int,
    ) -> Result[None, MetadataUploadFailed]:
        language = metadata.language_code
        self.console.print(f"Uploading metadata for {language} from {metadata.directory}")

        if metadata.listing.is_empty:
            self.console.debug(f"{language}: no listing text files")
        else:
            result = client.patch_listing(edit, metadata.listing)
            if isinstance(result, Err):
                return Err(
                    MetadataUploadFailed(
                        language_code=language, stage="listing", reason=str(result.error)
                    )
                )

        self.console.debug(f"{language}: changelogs matched {metadata.changelog_mode}")
        for entry in metadata.changelogs:
            self.console.print(
                f"Attaching changelog {entry.path} to version code {entry.version_code}"
            )
            result = client.update_changelog(edit, entry)
            if isinstance(result, Err):
                return Err(
                    MetadataUploadFailed(
                        language_code=language,
                        stage="changelog",
                        reason=str(result.error),
                        path=entry.path,
                    )
                )

        return self._upload_images(client, edit, metadata, max_workers)

    def _upload_images(
        self,
        client: EditClient,
        edit: EditRef,
        metadata: LanguageMetadata,
        max_workers: int,
    ) -> Result[None, MetadataUploadFailed]:
        groups = group_by_type(metadata.images)
        skipped = [str(t) for t in ImageType if t not in groups]
        if skipped:
            self.console.debug(f"{metadata.language_code}: no images for {', '.join(skipped)}")
        if not groups:
            return Ok(None)

        def upload_group(assets: tuple[ImageAsset, ...]) -> Result[None, MetadataUploadFailed]:
            # Sequential within a type: galleries keep their upload order.
            for asset in assets:
                self.console.debug(f"uploading {asset.image_type} image {asset.path}")
                result = client.upload_image(edit, asset)
                if isinstance(result, Err):
                    return Err(
                        MetadataUploadFailed(
                            language_code=asset.language_code,
                            stage="images",
                            reason=str(result.error),
                            path=asset.path,
                        )
                    )
            return Ok(None)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(upload_group, assets) for assets in groups.values()]
            wait(futures)

        for future in futures:
            result = future.result()
            if isinstance(result, Err):
                return result

        self.console.debug(f"{metadata.language_code}: uploaded {len(metadata.images)} images")
        return Ok(None)

    def _commit(self, client: EditClient, ctx: TransactionContext) -> StepResult:
        edit = ctx.edit_ref
        self.console.print(f"Committing edit {edit.edit_id}")
        result = client.commit(edit)
        if isinstance(result, Err):
            return Err(CommitFailed(edit_id=edit.edit_id, reason=str(result.error)))
        return Ok(self._transition(ctx, PublishState.COMMITTED))


def publish(
    config: PublishConfig,
    *,
    connector: ClientConnector,
    package_reader: PackageReader,
    console: ConsoleProtocol,
) -> Result[PublishReport, PublishError]:
    """Run one publish transaction with a fresh Publisher."""
    return Publisher(
        connector=connector, package_reader=package_reader, console=console
    ).publish(config)
