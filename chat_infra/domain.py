"""
Custom domain: Route 53 zone lookup, ACM certificate and DNS records.

The whole cluster exists only when ``use_custom_domain`` is set. Callers get a
``DomainCertificate`` or ``None`` and never index into a list of zero-or-one
resources.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import pulumi
import pulumi_aws as aws

from chat_infra.config import StackConfig

# CloudFront only accepts ACM certificates issued in us-east-1
CERTIFICATE_REGION = "us-east-1"
ALIAS_RECORD_TYPES = ("A", "AAAA")


@dataclass
class DomainCertificate:
    root_domain: str
    domain_names: List[str]
    zone: aws.route53.GetZoneResult
    certificate: aws.acm.Certificate
    validation_records: Dict[str, aws.route53.Record]
    validation: aws.acm.CertificateValidation

    @property
    def zone_id(self) -> str:
        return self.zone.zone_id

    @property
    def certificate_arn(self) -> pulumi.Output[str]:
        # Resolves only once validation has completed
        return self.validation.certificate_arn


def options_by_domain(options) -> dict:
    """
    Key the certificate's validation options by domain name.

    Two options for the same domain collapse into one entry (the last wins).
    """
    keyed = {}
    for option in options:
        if option.domain_name in keyed:
            pulumi.log.warn(
                f"ACM returned more than one validation option for {option.domain_name}; "
                "only one validation record will be created"
            )
        keyed[option.domain_name] = option
    return keyed


def create_certificate(config: StackConfig) -> Optional[DomainCertificate]:
    if not config.use_custom_domain:
        pulumi.log.info("custom domain disabled; CloudFront serves with its default certificate")
        return None

    domain_names = config.domain_names
    pulumi.log.info(f"custom domain enabled for {', '.join(domain_names)}")
    if config.environment != "prod":
        pulumi.log.warn(
            f"custom domain {config.root_domain} requested from the {config.environment} environment"
        )

    # 1) The hosted zone must already exist; it is never created here
    zone = aws.route53.get_zone(name=config.root_domain, private_zone=False)

    # 2) Certificate for the apex and www, proven through DNS
    us_east_1 = aws.Provider("us-east-1", region=CERTIFICATE_REGION)
    certificate = aws.acm.Certificate(
        "site-certificate",
        domain_name=config.root_domain,
        subject_alternative_names=domain_names[1:],
        validation_method="DNS",
        tags=config.tags,
        opts=pulumi.ResourceOptions(provider=us_east_1),
    )

    # 3) One validation record per domain name
    keyed_options = certificate.domain_validation_options.apply(options_by_domain)
    validation_records = {}
    for domain in domain_names:
        option = keyed_options.apply(lambda opts, d=domain: opts[d])
        validation_records[domain] = aws.route53.Record(
            f"cert-validation-{domain}",
            zone_id=zone.zone_id,
            name=option.apply(lambda o: o.resource_record_name),
            type=option.apply(lambda o: o.resource_record_type),
            records=[option.apply(lambda o: o.resource_record_value)],
            ttl=60,
            allow_overwrite=True,
        )

    # 4) Wait for ACM to see the records
    validation = aws.acm.CertificateValidation(
        "site-certificate-validation",
        certificate_arn=certificate.arn,
        validation_record_fqdns=[record.fqdn for record in validation_records.values()],
        opts=pulumi.ResourceOptions(provider=us_east_1),
    )

    return DomainCertificate(
        root_domain=config.root_domain,
        domain_names=domain_names,
        zone=zone,
        certificate=certificate,
        validation_records=validation_records,
        validation=validation,
    )


def create_alias_records(
    domain: DomainCertificate,
    distribution: aws.cloudfront.Distribution,
) -> List[aws.route53.Record]:
    """Point apex and www (IPv4 and IPv6) at the distribution."""
    records = []
    for name in domain.domain_names:
        for record_type in ALIAS_RECORD_TYPES:
            records.append(
                aws.route53.Record(
                    f"alias-{name}-{record_type.lower()}",
                    zone_id=domain.zone_id,
                    name=name,
                    type=record_type,
                    aliases=[
                        aws.route53.RecordAliasArgs(
                            name=distribution.domain_name,
                            zone_id=distribution.hosted_zone_id,
                            evaluate_target_health=False,
                        )
                    ],
                )
            )
    return records
