"""Deployment metadata models"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


@dataclass
class VcsInfo:
    """Version control state at deployment time"""
    available: bool = False
    branch: Optional[str] = None
    commit_hash: Optional[str] = None
    previous_commit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        if not self.available:
            return {'available': False}
        return {
            'available': True,
            'branch': self.branch,
            'commit_hash': self.commit_hash,
            'previous_commit': self.previous_commit
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'VcsInfo':
        """Create from dictionary"""
        data = data or {}
        return cls(
            available=bool(data.get('available', False)),
            branch=data.get('branch'),
            commit_hash=data.get('commit_hash'),
            previous_commit=data.get('previous_commit')
        )


@dataclass
class DependencyInfo:
    """Dependency manifest fingerprints"""
    manifest_hash: Optional[str] = None
    lock_hash: Optional[str] = None
    vendor_included: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'manifest_hash': self.manifest_hash,
            'lock_hash': self.lock_hash,
            'vendor_included': self.vendor_included
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DependencyInfo':
        """Create from dictionary"""
        return cls(
            manifest_hash=data.get('manifest_hash'),
            lock_hash=data.get('lock_hash'),
            vendor_included=bool(data.get('vendor_included', False))
        )


@dataclass
class DeploymentMetadata:
    """Record of the most recently applied deployment

    Embedded in every package and persisted by the receiver at the target
    root; each deployment overwrites it wholesale.
    """
    environment: str
    deployed_at: str
    deployment_type: str = "full"
    deployed_files_count: int = 0
    deleted_files: List[str] = field(default_factory=list)
    vcs: VcsInfo = field(default_factory=VcsInfo)
    dependencies: Optional[DependencyInfo] = None
    files: Optional[Dict[str, str]] = None
    method: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            'environment': self.environment,
            'deployed_at': self.deployed_at,
            'deployment_type': self.deployment_type,
            'deployed_files_count': self.deployed_files_count,
            'deleted_files': list(self.deleted_files),
            'vcs': self.vcs.to_dict()
        }

        if self.dependencies is not None:
            data['dependencies'] = self.dependencies.to_dict()
        if self.files is not None:
            data['files'] = dict(self.files)
        if self.method:
            data['method'] = self.method

        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeploymentMetadata':
        """Create from dictionary"""
        dependencies = data.get('dependencies')
        files = data.get('files')

        return cls(
            environment=data.get('environment') or 'default',
            deployed_at=data.get('deployed_at') or '',
            deployment_type=data.get('deployment_type') or 'full',
            deployed_files_count=int(data.get('deployed_files_count') or 0),
            deleted_files=list(data.get('deleted_files') or []),
            vcs=VcsInfo.from_dict(data.get('vcs')),
            dependencies=DependencyInfo.from_dict(dependencies) if isinstance(dependencies, dict) else None,
            # Older writers emitted an empty JSON list instead of an object
            files=dict(files) if isinstance(files, dict) else None,
            method=data.get('method')
        )

    def to_json(self) -> str:
        """Serialize to pretty-printed JSON"""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> 'DeploymentMetadata':
        """Parse from JSON text"""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Deployment metadata must be a JSON object")
        return cls.from_dict(data)
