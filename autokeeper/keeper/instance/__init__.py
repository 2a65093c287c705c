from .instance_probe import (
    InstanceProbe as InstanceProbe,
    LocalInstanceProbe as LocalInstanceProbe,
)
