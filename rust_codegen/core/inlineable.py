"""
Support modules generated into the crate on demand.

Each factory returns a RuntimeType whose dependency is an InlineDependency;
the first time generated code references it, the module below is written
into the crate and its own references register their dependencies.
"""

from .config import RuntimeConfig
from .dependencies import FASTRAND, SERDE, SERDE_JSON, InlineDependency, smithy_http, smithy_types
from .model import TimestampFormat
from .runtime_types import (
    LOCAL_ROOT,
    HASH_MAP,
    STD_ERROR,
    RuntimeType,
    base64_decode,
    base64_encode,
    blob,
    document,
    instant,
    serde,
    serde_json,
    std_fmt,
    timestamp_format,
)


def _render_error_code(writer):
    writer.rust(
        """
        /// Strips the namespace and any trailing URI from a modeled error code.
        pub fn sanitize_error_code(error_code: &str) -> &str {
            let error_code = match error_code.find(':') {
                Some(idx) => &error_code[..idx],
                None => error_code,
            };
            match error_code.find('#') {
                Some(idx) => &error_code[idx + 1..],
                None => error_code,
            }
        }
        """
    )


ERROR_CODE_DEPENDENCY = InlineDependency(
    "error_code", "error_code", renderer=_render_error_code
)
ERROR_CODE = RuntimeType("error_code", ERROR_CODE_DEPENDENCY, LOCAL_ROOT)
SANITIZE_ERROR_CODE = ERROR_CODE.member("sanitize_error_code")


def _render_generic_error(writer):
    writer.rust(
        """
        #[derive(Debug, Default, Clone, PartialEq)]
        pub struct GenericError {
            code: Option<String>,
            message: Option<String>,
            request_id: Option<String>,
        }

        impl GenericError {
            pub fn new(code: &str, message: Option<String>, request_id: Option<String>) -> Self {
                GenericError {
                    code: Some(#{sanitize}(code).to_string()),
                    message,
                    request_id,
                }
            }

            pub fn code(&self) -> Option<&str> {
                self.code.as_deref()
            }

            pub fn message(&self) -> Option<&str> {
                self.message.as_deref()
            }

            pub fn request_id(&self) -> Option<&str> {
                self.request_id.as_deref()
            }
        }

        impl #{display} for GenericError {
            fn fmt(&self, f: &mut #{formatter}<'_>) -> #{fmt_result} {
                write!(f, "Error")?;
                if let Some(code) = &self.code {
                    write!(f, " [{}]", code)?;
                }
                if let Some(message) = &self.message {
                    write!(f, ": {}", message)?;
                }
                Ok(())
            }
        }

        impl #{error} for GenericError {}
        """,
        sanitize=SANITIZE_ERROR_CODE,
        display=std_fmt("Display"),
        formatter=std_fmt("Formatter"),
        fmt_result=std_fmt("Result"),
        error=STD_ERROR,
    )


GENERIC_ERROR = RuntimeType(
    "GenericError",
    InlineDependency(
        "generic_error",
        "types",
        extra_dependencies=(ERROR_CODE_DEPENDENCY,),
        renderer=_render_generic_error,
    ),
    f"{LOCAL_ROOT}::types",
)


def _render_idempotency_token(writer):
    writer.rust(
        """
        /// Generates a random UUID v4 for idempotency token members.
        pub fn uuid_v4() -> String {
            let bytes: u128 = #{rand}(..);
            let bytes = (bytes & 0xFFFF_FFFF_FFFF_0FFF_3FFF_FFFF_FFFF_FFFF)
                | 0x0000_0000_0000_4000_8000_0000_0000_0000;
            let hex = format!("{:032x}", bytes);
            format!(
                "{}-{}-{}-{}-{}",
                &hex[0..8],
                &hex[8..12],
                &hex[12..16],
                &hex[16..20],
                &hex[20..32]
            )
        }
        """,
        rand=RuntimeType("u128", FASTRAND, "fastrand"),
    )


IDEMPOTENCY_TOKEN = RuntimeType(
    "idempotency_token",
    InlineDependency(
        "idempotency_token",
        "idempotency_token",
        extra_dependencies=(FASTRAND,),
        renderer=_render_idempotency_token,
    ),
    LOCAL_ROOT,
)


def doc_json(runtime_config: RuntimeConfig) -> RuntimeType:
    """Conversions between Document and serde_json::Value."""

    def render(writer):
        writer.rust(
            """
            pub fn json_to_doc(json: #{value}) -> #{document} {
                match json {
                    #{value}::Null => #{document}::Null,
                    #{value}::Bool(b) => #{document}::Bool(b),
                    #{value}::Number(n) => match n.as_f64() {
                        Some(f) => #{document}::Number(#{number}::Float(f)),
                        None => #{document}::Null,
                    },
                    #{value}::String(s) => #{document}::String(s),
                    #{value}::Array(items) => {
                        #{document}::Array(items.into_iter().map(json_to_doc).collect())
                    }
                    #{value}::Object(map) => #{document}::Object(
                        map.into_iter()
                            .map(|(k, v)| (k, json_to_doc(v)))
                            .collect::<#{hash_map}<_, _>>(),
                    ),
                }
            }
            """,
            value=serde_json("Value"),
            document=document(runtime_config),
            number=RuntimeType(
                "Number",
                smithy_types(runtime_config),
                runtime_config.module_name("types"),
            ),
            hash_map=HASH_MAP,
        )

    return RuntimeType(
        "doc_json",
        InlineDependency(
            "doc_json",
            "doc_json",
            extra_dependencies=(SERDE_JSON, smithy_types(runtime_config)),
            renderer=render,
        ),
        LOCAL_ROOT,
    )


def blob_serde(runtime_config: RuntimeConfig) -> RuntimeType:
    """Base64 serde adapters for Blob."""

    def render(writer):
        writer.rust(
            """
            pub struct BlobSer<'a>(pub &'a #{blob});

            impl #{serialize} for BlobSer<'_> {
                fn serialize<S>(&self, serializer: S) -> Result<S::Ok, S::Error>
                where
                    S: #{serializer},
                {
                    serializer.serialize_str(&#{encode}(self.0.as_ref()))
                }
            }

            pub struct BlobDeser {
                inner: #{blob},
            }

            impl BlobDeser {
                pub fn take(self) -> #{blob} {
                    self.inner
                }
            }

            impl<'de> #{deserialize}<'de> for BlobDeser {
                fn deserialize<D>(deserializer: D) -> Result<Self, D::Error>
                where
                    D: #{deserializer}<'de>,
                {
                    let data = <&str>::deserialize(deserializer)?;
                    let bytes = #{decode}(data).map_err(#{de_error}::custom)?;
                    Ok(BlobDeser {
                        inner: #{blob}::new(bytes),
                    })
                }
            }
            """,
            blob=blob(runtime_config),
            serialize=serde("Serialize"),
            serializer=serde("Serializer"),
            deserialize=serde("Deserialize"),
            deserializer=serde("Deserializer"),
            de_error=serde("de::Error"),
            encode=base64_encode(runtime_config),
            decode=base64_decode(runtime_config),
        )

    return RuntimeType(
        "blob_serde",
        InlineDependency(
            "blob_serde",
            "blob_serde",
            extra_dependencies=(
                SERDE,
                smithy_types(runtime_config),
                smithy_http(runtime_config),
            ),
            renderer=render,
        ),
        LOCAL_ROOT,
    )


_INSTANT_MODULES = {
    TimestampFormat.EPOCH_SECONDS: "instant_epoch",
    TimestampFormat.DATE_TIME: "instant_8601",
    TimestampFormat.HTTP_DATE: "instant_httpdate",
}


def _render_instant_module(writer, runtime_config: RuntimeConfig, fmt: TimestampFormat):
    named = dict(
        instant=instant(runtime_config),
        serializer=serde("Serializer"),
        deserializer=serde("Deserializer"),
        deserialize=serde("Deserialize"),
        de_error=serde("de::Error"),
    )

    if fmt == TimestampFormat.EPOCH_SECONDS:
        writer.rust(
            """
            pub fn serialize<S>(instant: &#{instant}, serializer: S) -> Result<S::Ok, S::Error>
            where
                S: #{serializer},
            {
                serializer.serialize_i64(instant.epoch_seconds())
            }

            pub fn deserialize<'de, D>(deserializer: D) -> Result<#{instant}, D::Error>
            where
                D: #{deserializer}<'de>,
            {
                let seconds = <i64 as #{deserialize}>::deserialize(deserializer)?;
                Ok(#{instant}::from_epoch_seconds(seconds))
            }
            """,
            **named,
        )
    else:
        writer.rust(
            """
            pub fn serialize<S>(instant: &#{instant}, serializer: S) -> Result<S::Ok, S::Error>
            where
                S: #{serializer},
            {
                serializer.serialize_str(&instant.fmt(#{format}))
            }

            pub fn deserialize<'de, D>(deserializer: D) -> Result<#{instant}, D::Error>
            where
                D: #{deserializer}<'de>,
            {
                let text = <String as #{deserialize}>::deserialize(deserializer)?;
                #{instant}::from_str(&text, #{format}).map_err(#{de_error}::custom)
            }
            """,
            format=timestamp_format(runtime_config, fmt),
            **named,
        )

    writer.rust("")
    writer.rust(
        """
        pub mod opt {
            pub fn serialize<S>(value: &Option<#{instant}>, serializer: S) -> Result<S::Ok, S::Error>
            where
                S: #{serializer},
            {
                match value {
                    Some(instant) => super::serialize(instant, serializer),
                    None => serializer.serialize_none(),
                }
            }

            pub fn deserialize<'de, D>(deserializer: D) -> Result<Option<#{instant}>, D::Error>
            where
                D: #{deserializer}<'de>,
            {
                super::deserialize(deserializer).map(Some)
            }
        }
        """,
        **named,
    )


def instant_serde(runtime_config: RuntimeConfig, fmt: TimestampFormat) -> RuntimeType:
    """
    Serde ``with`` module for Instant in the given timestamp format.

    Raises:
        UnsupportedTraitVariant: For TimestampFormat.UNKNOWN
    """
    # Validates the format before anything is registered
    timestamp_format(runtime_config, fmt)
    module = _INSTANT_MODULES[fmt]

    def render(writer):
        _render_instant_module(writer, runtime_config, fmt)

    return RuntimeType(
        module,
        InlineDependency(
            module,
            module,
            extra_dependencies=(SERDE, smithy_types(runtime_config)),
            renderer=render,
        ),
        LOCAL_ROOT,
    )


def instant_epoch(runtime_config: RuntimeConfig) -> RuntimeType:
    return instant_serde(runtime_config, TimestampFormat.EPOCH_SECONDS)


def instant_http_date(runtime_config: RuntimeConfig) -> RuntimeType:
    return instant_serde(runtime_config, TimestampFormat.HTTP_DATE)


def instant_8601(runtime_config: RuntimeConfig) -> RuntimeType:
    return instant_serde(runtime_config, TimestampFormat.DATE_TIME)
